from __future__ import annotations

import numpy as np
import pytest
import trimesh

from core import CalculationOptions, ObstructionOracle
from models import Room, Window

ROOM_POLYGON = ((0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0))


def make_room(polygon=ROOM_POLYGON, height: float = 2.7) -> Room:
    return Room.from_polygon("R1", polygon, height=height, name="Test room")


def make_window(transmittance: float = 0.7, **overrides) -> Window:
    """2m x 1.2m window in the y = 0 wall, facing -Y (south), sill at 0.9m."""
    values = dict(
        id="W1",
        center=(2.0, 0.0, 1.5),
        normal=(0.0, -1.0, 0.0),
        width=2.0,
        height=1.2,
        transmittance=transmittance,
        vertices=((1.0, 0.0, 0.9), (3.0, 0.0, 0.9), (3.0, 0.0, 2.1), (1.0, 0.0, 2.1)),
        sill_height=0.9,
    )
    values.update(overrides)
    return Window(**values)


def make_plane_mesh(y: float = -0.1, half_size: float = 10.0) -> trimesh.Trimesh:
    """Opaque vertical plane parallel to the window wall, centred on the window."""
    vertices = np.array([
        [2.0 - half_size, y, 1.5 - half_size],
        [2.0 + half_size, y, 1.5 - half_size],
        [2.0 + half_size, y, 1.5 + half_size],
        [2.0 - half_size, y, 1.5 + half_size],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


@pytest.fixture
def room() -> Room:
    return make_room()


@pytest.fixture
def window() -> Window:
    return make_window()


@pytest.fixture
def options() -> CalculationOptions:
    return CalculationOptions()


@pytest.fixture
def outside_plane() -> ObstructionOracle:
    return ObstructionOracle.from_meshes(make_plane_mesh())
