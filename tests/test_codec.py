"""Grid file codec tests."""

from __future__ import annotations

import io

import numpy as np
import pytest

from latticemc.codec import encode, format_header, load_grid, read, read_grid, read_header, save_grid, write
from latticemc.errors import FormatError, UnsupportedTypeError
from latticemc.generate import random_heisenberg_grid, random_potts_grid
from latticemc.grid import Grid
from latticemc.sites import SCALAR_DOUBLE, SCALAR_INT, VECTOR_DOUBLE, vector_double


pytestmark = pytest.mark.unit


def _int_payload(values: list[int]) -> bytes:
    return np.asarray(values, dtype="<i4").tobytes()


def test_encode_exact_layout() -> None:
    grid = Grid.from_array(np.array([[1, 2], [3, 4]]), SCALAR_INT)
    assert encode(grid) == b"grid:scalar:int\n2\n2 2\n" + _int_payload([1, 2, 3, 4])


def test_vector_payload_components_contiguous() -> None:
    grid = Grid.zeros((1, 2), VECTOR_DOUBLE)
    grid.set((0, 0), [1.0, 2.0, 3.0])
    grid.set((0, 1), [4.0, 5.0, 6.0])
    data = encode(grid)
    header = b"grid:vector:double\n2\n1 2\n"
    assert data.startswith(header)
    payload = np.frombuffer(data[len(header):], dtype="<f8")
    assert payload.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def test_round_trip_scalar_2d() -> None:
    grid = random_potts_grid((5, 7), 12, np.random.default_rng(1))
    buf = io.BytesIO()
    write(grid, buf)
    buf.seek(0)
    back = read_grid(buf)
    assert back.same_as(grid)
    assert back.site_type == SCALAR_INT
    assert encode(back) == encode(grid)


def test_round_trip_vector_3d(tmp_path) -> None:
    grid = random_heisenberg_grid((2, 3, 4), np.random.default_rng(2))
    path = save_grid(grid, tmp_path / "spins.dat")
    back = load_grid(path)
    assert back.same_as(grid)
    assert back.extents == (2, 3, 4)
    assert path.read_bytes() == encode(grid)


def test_round_trip_custom_arity() -> None:
    grid = random_heisenberg_grid((3, 3), np.random.default_rng(3), arity=2)
    back = read_grid(io.BytesIO(encode(grid)), vector_arity=2)
    assert back.same_as(grid)
    assert back.site_type == vector_double(2)


def test_round_trip_scalar_double() -> None:
    grid = Grid.from_array(np.linspace(-1.0, 1.0, 6).reshape(2, 3), SCALAR_DOUBLE)
    assert read_grid(io.BytesIO(encode(grid))).same_as(grid)


def test_legacy_int_tag_reads_as_scalar_int() -> None:
    raw = b"grid:int\n2\n2 2\n" + _int_payload([0, 1, 1, 0])
    grid = read_grid(io.BytesIO(raw))
    assert grid.site_type == SCALAR_INT
    assert encode(grid).startswith(b"grid:scalar:int\n")


def test_read_returns_tag_dimension_extents_payload() -> None:
    payload = _int_payload(list(range(6)))
    decoded = read(io.BytesIO(b"grid:scalar:int\n2\n2 3\n" + payload))
    assert decoded.tag == "grid:scalar:int"
    assert decoded.dimension == 2
    assert decoded.extents == (2, 3)
    assert decoded.payload == payload


def test_non_grid_file_is_format_error() -> None:
    with pytest.raises(FormatError, match="does not contain grid data"):
        read_grid(io.BytesIO(b"notgrid\n2\n4 4\n" + b"\x00" * 64))


def test_unknown_tag_is_unsupported_type() -> None:
    raw = b"grid:vector:float\n2\n2 2\n" + b"\x00" * 48
    with pytest.raises(UnsupportedTypeError):
        read_grid(io.BytesIO(raw))


@pytest.mark.parametrize(
    "header",
    [
        b"grid:scalar:int\nx\n2 2\n",
        b"grid:scalar:int\n4\n2 2 2 2\n",
        b"grid:scalar:int\n0\n\n",
        b"grid:scalar:int\n2\n4\n",
        b"grid:scalar:int\n2\n4 0\n",
        b"grid:scalar:int\n2\n4 a\n",
        b"grid:scalar:int\n2\n4 4",
    ],
)
def test_malformed_headers(header: bytes) -> None:
    with pytest.raises(FormatError):
        read_header(io.BytesIO(header))


def test_truncated_payload() -> None:
    raw = b"grid:scalar:int\n2\n2 2\n" + _int_payload([1, 2, 3])
    with pytest.raises(FormatError, match="truncated"):
        read_grid(io.BytesIO(raw))


def test_truncated_mid_value() -> None:
    raw = b"grid:vector:double\n2\n1 1\n" + np.zeros(3, dtype="<f8").tobytes()[:-2]
    with pytest.raises(FormatError):
        read_grid(io.BytesIO(raw))


def test_trailing_bytes_rejected() -> None:
    raw = b"grid:scalar:int\n2\n2 2\n" + _int_payload([1, 2, 3, 4]) + b"\x00"
    with pytest.raises(FormatError, match="longer"):
        read_grid(io.BytesIO(raw))


def test_expected_type_mismatch() -> None:
    raw = encode(Grid.zeros((2, 2), SCALAR_INT))
    with pytest.raises(FormatError, match="does not match"):
        Grid.from_stream(io.BytesIO(raw), expected=VECTOR_DOUBLE)
    grid = Grid.from_stream(io.BytesIO(raw), expected=[VECTOR_DOUBLE, SCALAR_INT])
    assert grid.site_type == SCALAR_INT


def test_from_file_with_boundary(tmp_path) -> None:
    path = save_grid(Grid.zeros((3, 3)), tmp_path / "g.dat")
    grid = Grid.from_file(path, boundary="fixed")
    assert grid.boundaries == ("fixed", "fixed")


def test_format_header_dimension_three() -> None:
    assert format_header(SCALAR_INT, (2, 3, 4)) == b"grid:scalar:int\n3\n2 3 4\n"


def test_write_failure_surfaces_as_oserror() -> None:
    class BrokenSink:
        def write(self, data: bytes) -> int:
            raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        write(Grid.zeros((2, 2)), BrokenSink())


def test_overflowing_extents_are_format_error() -> None:
    raw = b"grid:scalar:int\n3\n4294967296 4294967296 1\n"
    with pytest.raises(FormatError, match="exceed the limit"):
        read_grid(io.BytesIO(raw))


def test_header_size_does_not_wrap() -> None:
    header = read_header(io.BytesIO(b"grid:scalar:int\n3\n1024 1024 1024\n"))
    assert header.size == 1024**3


def test_payload_shorter_than_header_checked_before_read(tmp_path) -> None:
    path = tmp_path / "big.dat"
    path.write_bytes(b"grid:vector:double\n3\n1000 1000 1000\n" + b"\x00" * 24)
    with pytest.raises(FormatError, match="truncated"):
        load_grid(path)
