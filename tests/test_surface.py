import numpy as np
import pytest
import near2far as n2f
from near2far.components.geometry import cell_centers
from near2far.exceptions import InvalidConfiguration

from .utils import assert_log_level


def test_cell_centers():
    points, spacing = cell_centers(center=0.0, size=1.0, resolution=4)
    assert np.allclose(points, [-0.375, -0.125, 0.125, 0.375])
    assert np.isclose(spacing, 0.25)

    points, spacing = cell_centers(center=2.0, size=0.0, resolution=4)
    assert np.array_equal(points, [2.0])
    assert spacing == 0.0

    # at least one cell, even when the interval is shorter than the spacing
    points, spacing = cell_centers(center=0.0, size=0.1, resolution=4)
    assert np.allclose(points, [0.0])
    assert np.isclose(spacing, 0.1)


def test_box_bounds():
    box = n2f.Box(center=(1, 2, 3), size=(2, 4, 0))
    assert box.bounds == ((0, 0, 3), (2, 4, 3))


def test_coordinate_conversions():
    assert np.allclose(n2f.Box.sph_2_car(1.0, np.pi / 2, np.pi / 2), (0, 1, 0), atol=1e-12)

    f_r, f_theta, f_phi = n2f.Box.car_2_sph_field(1.0, 2.0, 3.0, theta=0.0, phi=0.0)
    assert np.allclose((f_r, f_theta, f_phi), (3, 1, 2))
    assert n2f.Box.pop_axis((0, 1, 2), axis=1) == (1, (0, 2))


def test_patch_normal():
    patch = n2f.NearFieldPatch(center=(0, 0, 1), size=(2, 2, 0))
    assert patch.normal_axis() == 2

    line = n2f.NearFieldPatch(center=(0, 1, 0), size=(2, 0, 0))
    assert line.normal_axis(dimensions=2) == 1
    with pytest.raises(InvalidConfiguration):
        line.normal_axis(dimensions=3)

    explicit = n2f.NearFieldPatch(center=(0, 1, 0), size=(2, 0, 0), direction=1)
    assert explicit.normal_axis(dimensions=3) == 1


def test_region_box_3d():
    region = n2f.NearFieldRegion.box(center=(0, 0, 0), size=(2, 2, 2), resolution=5)
    assert len(region.patches) == 6
    assert [patch.weight for patch in region.patches] == [-1, 1, -1, 1, -1, 1]
    assert [patch.direction for patch in region.patches] == [0, 0, 1, 1, 2, 2]
    assert region.bounds == ((-1, -1, -1), (1, 1, 1))
    for grid in region.grids:
        assert grid.num_samples == 100
        assert np.isclose(grid.dA, 0.04)
    assert region.num_samples == 600

    x_plus = region.grids[1]
    assert x_plus.components == ("Ey", "Ez", "Hy", "Hz")
    assert np.array_equal(x_plus.normal, [1, 0, 0])
    assert x_plus.shape == (1, 10, 10)
    assert x_plus.sample_points().shape == (100, 3)


def test_region_box_2d():
    region = n2f.NearFieldRegion.box(center=(0, 0, 5), size=(2, 1, 3), dimensions=2, resolution=4)
    assert len(region.patches) == 4
    for patch in region.patches:
        assert patch.center[2] == 0 and patch.size[2] == 0
    y_minus = region.grids[2]
    assert y_minus.shape == (8, 1, 1)
    assert np.isclose(y_minus.dA, 0.25)
    assert y_minus.components == ("Ex", "Ez", "Hx", "Hz")
    assert np.array_equal(y_minus.normal, [0, -1, 0])
    x_minus = region.grids[0]
    assert x_minus.shape == (1, 4, 1)


def test_region_box_invalid():
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion.box(center=(0, 0, 0), size=(1, 0, 1))


def test_region_invalid():
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion(patches=[])

    # not planar
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion(
            patches=[n2f.NearFieldPatch(center=(0, 0, 0), size=(1, 1, 1), direction=0)]
        )

    # zero area
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion(
            patches=[n2f.NearFieldPatch(center=(0, 0, 0), size=(0, 1, 0), direction=0)]
        )

    # 2D region out of the z=0 plane
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion(
            patches=[n2f.NearFieldPatch(center=(0, 0, 1), size=(0, 1, 0))], dimensions=2
        )

    # 2D region with a normal along z
    with pytest.raises(InvalidConfiguration):
        n2f.NearFieldRegion(
            patches=[n2f.NearFieldPatch(center=(0, 0, 0), size=(1, 1, 0), direction=2)],
            dimensions=2,
        )


def test_zero_weight_warns(log_capture):
    region = n2f.NearFieldRegion(
        patches=[n2f.NearFieldPatch(center=(0, 0, 0), size=(1, 1, 0), weight=0)]
    )
    assert len(region.grids) == 1
    assert_log_level(log_capture, "WARNING", contains_str="zero weight")


def test_patch_grid_invalid_coords(log_capture):
    kwargs = dict(y=[0.0], z=[0.0], dA=0.1, normal_axis=1)
    with pytest.raises(ValueError):
        n2f.PatchGrid(x=np.array([0.0, np.nan]), **kwargs)
    assert_log_level(log_capture, "ERROR", contains_str="nan values")
    with pytest.raises(ValueError):
        n2f.PatchGrid(x=np.zeros((2, 2)), **kwargs)


def test_region_to_file(tmp_path):
    region = n2f.NearFieldRegion.box(center=(0, 0, 0), size=(1, 2, 3), resolution=3)
    for extension in ("json", "yaml"):
        fname = str(tmp_path / f"region.{extension}")
        region.to_file(fname)
        assert n2f.NearFieldRegion.from_file(fname) == region


def test_region_to_file_extension(tmp_path):
    region = n2f.NearFieldRegion.box(center=(0, 0, 0), size=(1, 2, 3), resolution=3)
    with pytest.raises(n2f.FileError):
        region.to_file(str(tmp_path / "region.txt"))
