"""Tests for the gravity/geomagnetic rotation provider."""

from __future__ import annotations

import math

import numpy as np
import pytest

from core.imu.rotation import GravityMagneticRotation


def test_flat_device_facing_north_is_identity():
    provider = GravityMagneticRotation()
    R = provider.get_rotation_matrix([0.0, 0.0, 9.81], [0.0, 22.0, -40.0])

    assert R is not None
    assert np.allclose(R, np.eye(3))

    azimuth, pitch, roll = provider.get_orientation(R)
    assert azimuth == pytest.approx(0.0)
    assert pitch == pytest.approx(0.0)
    assert roll == pytest.approx(0.0)


def test_flat_device_facing_east():
    provider = GravityMagneticRotation()
    # Device top towards east: north lies along the device's -x axis
    R = provider.get_rotation_matrix([0.0, 0.0, 9.81], [-22.0, 0.0, -40.0])

    azimuth, _, _ = provider.get_orientation(R)
    assert azimuth == pytest.approx(math.pi / 2)


def test_rotation_matrix_is_orthonormal_for_tilted_device():
    provider = GravityMagneticRotation()
    R = provider.get_rotation_matrix([1.5, -2.0, 9.3], [10.0, 18.0, -35.0])

    assert R is not None
    assert np.allclose(R @ R.T, np.eye(3), atol=1e-9)
    assert np.linalg.det(R) == pytest.approx(1.0)


def test_pitch_when_device_stands_upright():
    provider = GravityMagneticRotation()
    # Upright, screen facing the user: gravity along +y
    R = provider.get_rotation_matrix([0.0, 9.81, 0.0], [0.0, 20.0, 30.0])

    _, pitch, _ = provider.get_orientation(R)
    assert pitch == pytest.approx(-math.pi / 2)


def test_free_fall_returns_none():
    provider = GravityMagneticRotation()
    assert provider.get_rotation_matrix([0.0, 0.0, 0.5], [0.0, 22.0, -40.0]) is None


def test_field_parallel_to_gravity_returns_none():
    provider = GravityMagneticRotation()
    assert provider.get_rotation_matrix([0.0, 0.0, 9.81], [0.0, 0.0, -40.0]) is None


def test_non_finite_input_returns_none():
    provider = GravityMagneticRotation()
    assert provider.get_rotation_matrix([float("nan"), 0.0, 9.81], [0.0, 22.0, -40.0]) is None
