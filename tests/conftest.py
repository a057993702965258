"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

import numpy as np

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def sim_params():
    """Simulation parameters matching the shipped proximity defaults."""
    return {
        "seed": 1234,
        "physics_variant": "proximity",
        "interaction_distance": 120.0,
        "collision_radius": 5.0,
        "point_density": 0.1,
        "velocity_range": 500.0,
        "position_scale": 10.0,
        "repulsion_radius": 60.0,
        "repulsion_strength": 0.5,
        "damping_factor": 0.92,
        "damping_threshold": 12.0,
        "constant_damping": 0.99,
        "gravity": 9.8,
        "fallback_delta_time": 1.0 / 60.0,
        "max_delta_time": 0.1,
    }


@pytest.fixture
def elastic_params(sim_params):
    """The same parameters with gravity and elastic collisions enabled."""
    return dict(sim_params, physics_variant="elastic")


@pytest.fixture
def rng():
    """A seeded random source so populations are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def project_root_path():
    """Provide the project root path."""
    return project_root
