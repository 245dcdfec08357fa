"""
Tests for the particle engine and gesture forces
"""

import numpy as np
import pytest

from handmagic.recognition.gesture_classifier import Gesture, GestureType
from handmagic.simulation.colors import PALETTES, Theme, hsl_to_rgb
from handmagic.simulation.forces import (
    FORCE_TABLE, chaos, force_for, orbit, passive_repulse, repel, suction, swirl, wave,
)
from handmagic.simulation.particles import ParticleEngine, ParticleEngineConfig, ParticleField
from handmagic.simulation.state import InteractionState

DT = 1.0 / 60.0


def make_engine(points, **config):
    """Engine over a hand-placed field with NEBULA colors."""
    positions = np.asarray(points, dtype=np.float32)
    colors = np.full_like(positions, 0.5)
    return ParticleEngine(ParticleEngineConfig(seed=1, **config), ParticleField(positions, colors))


def hand_state(gesture_type, strength=1.0, position=(0.0, 0.0, 0.0), time=0.0):
    return InteractionState(
        hand_position=np.array(position, dtype=np.float32),
        gesture=Gesture(gesture_type, strength),
        hand_present=True,
        time=time,
    )


class TestParticleField:
    """Test seeding and buffer layout."""

    @pytest.fixture
    def engine(self):
        return ParticleEngine(ParticleEngineConfig(count=5000, seed=3))

    def test_default_count(self):
        assert ParticleEngineConfig().count == 25000

    def test_buffers(self, engine):
        assert engine.count == 5000
        for buf in (engine.positions, engine.velocities, engine.colors, engine.home_positions):
            assert buf.shape == (5000, 3)
            assert buf.dtype == np.float32

    def test_seeded_inside_sphere(self, engine):
        radii = np.linalg.norm(engine.positions.astype(np.float64), axis=1)
        assert radii.max() <= 80.0 + 1e-3

    def test_starts_at_rest_at_home(self, engine):
        np.testing.assert_array_equal(engine.positions, engine.home_positions)
        assert not np.any(engine.velocities)

    def test_seed_colors_on_gradient(self, engine):
        """NEBULA runs cyan to magenta: blue is 1 and red + green is 1."""
        colors = engine.colors
        np.testing.assert_allclose(colors[:, 2], 1.0)
        np.testing.assert_allclose(colors[:, 0] + colors[:, 1], 1.0, atol=1e-6)

    def test_same_seed_same_field(self):
        a = ParticleEngine(ParticleEngineConfig(count=100, seed=11))
        b = ParticleEngine(ParticleEngineConfig(count=100, seed=11))
        np.testing.assert_array_equal(a.positions, b.positions)

    def test_mismatched_buffers_rejected(self):
        with pytest.raises(AssertionError):
            ParticleField(np.zeros((4, 3)), np.zeros((3, 3)))


class TestEngineInvariants:
    """Properties that hold for every tick."""

    @pytest.fixture
    def engine(self):
        return ParticleEngine(ParticleEngineConfig(count=1000, seed=5))

    def test_count_and_home_preserved(self, engine):
        home = engine.home_positions.copy()
        gestures = [g for g in GestureType if g != GestureType.DOUBLE_PALM]
        for i in range(120):
            state = hand_state(gestures[i % len(gestures)], time=i * DT,
                               position=(5.0, -3.0, 2.0))
            engine.step(state, DT)
            engine.field.check_invariants()
        assert engine.count == 1000
        np.testing.assert_array_equal(engine.home_positions, home)
        assert np.all(np.isfinite(engine.positions))

    def test_home_is_write_protected(self, engine):
        with pytest.raises(ValueError):
            engine.home_positions[0, 0] = 1.0

    def test_views_are_read_only(self, engine):
        for view in (engine.positions, engine.velocities, engine.colors):
            assert not view.flags.writeable

    @pytest.mark.parametrize("dt,expected", [(0.5, 0.1), (0.1, 0.1), (0.02, 0.02), (-1.0, 0.0)])
    def test_dt_clamp(self, engine, dt, expected):
        assert engine.step(InteractionState(), dt) == pytest.approx(expected)

    def test_step_count(self, engine):
        engine.step(InteractionState(), DT)
        engine.step(InteractionState(), DT)
        assert engine.step_count == 2


class TestHomeForceAndDamping:
    """Test the return to rest."""

    def test_damping_factor(self):
        engine = make_engine([[10.0, 0.0, 0.0]])
        engine.field.velocities[:] = 1.0
        engine.step(InteractionState(), 0.0)
        np.testing.assert_allclose(engine.velocities, 0.92, rtol=1e-6)

    def test_displaced_particles_return_monotonically(self):
        engine = make_engine([[10.0, 0.0, 0.0], [-20.0, 5.0, 3.0], [0.0, 0.0, 40.0]])
        engine.field.positions += np.float32(10.0)
        home = engine.home_positions.astype(np.float64)

        def offsets():
            return np.linalg.norm(engine.positions.astype(np.float64) - home, axis=1)

        initial = offsets()
        previous = initial
        for _ in range(1200):
            engine.step(InteractionState(), DT)
            current = offsets()
            assert np.all(current <= previous + 1e-5)
            previous = current
        assert np.all(previous < 0.01 * initial)

    def test_idle_field_stays_home(self):
        """25,000 particles, no hand, 300 ticks at 60 fps."""
        engine = ParticleEngine(ParticleEngineConfig(seed=42))
        state = InteractionState()
        colors = engine.colors.copy()
        for _ in range(300):
            engine.step(state, DT)
        np.testing.assert_allclose(engine.positions, engine.home_positions, atol=1e-4)
        assert np.abs(engine.velocities).max() < 1e-3
        np.testing.assert_array_equal(engine.colors, colors)

    def test_absent_hand_ignores_gesture(self):
        engine = make_engine([[5.0, 0.0, 0.0]])
        state = hand_state(GestureType.CLOSED_FIST)
        state.hand_present = False
        engine.step(state, DT)
        np.testing.assert_array_equal(engine.positions, [[5.0, 0.0, 0.0]])


class TestGestureForces:
    """One test per force field."""

    def test_fist_pushes_particles_out(self):
        """CLOSED_FIST at the origin for one second moves near particles outward."""
        engine = ParticleEngine(ParticleEngineConfig(seed=7))
        r0 = np.linalg.norm(engine.positions.astype(np.float64), axis=1)
        state = hand_state(GestureType.CLOSED_FIST)
        for i in range(60):
            state.time = i * DT
            engine.step(state, DT)
        r1 = np.linalg.norm(engine.positions.astype(np.float64), axis=1)

        inside = (r0 > 0) & (r0 < 50.0)
        assert np.count_nonzero(inside) > 0
        assert np.all(r1[inside] > r0[inside])

        outside = r0 > 50.01
        np.testing.assert_array_equal(r1[outside], r0[outside])

    def test_fist_particle_on_hand(self):
        engine = make_engine([[0.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.CLOSED_FIST), DT)
        assert np.all(np.isfinite(engine.positions))
        assert not np.any(engine.velocities)

    def test_pinch_attracts(self):
        engine = make_engine([[10.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.PINCH), DT)
        assert engine.positions[0, 0] < 10.0

    def test_pinch_scales_with_strength(self):
        strong = make_engine([[10.0, 0.0, 0.0]])
        weak = make_engine([[10.0, 0.0, 0.0]])
        strong.step(hand_state(GestureType.PINCH, strength=1.0), DT)
        weak.step(hand_state(GestureType.PINCH, strength=0.25), DT)
        assert strong.velocities[0, 0] == pytest.approx(4 * weak.velocities[0, 0], rel=1e-5)

    def test_swirl(self):
        engine = make_engine([[10.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.OPEN_HAND), DT)
        vx, vy, _ = engine.velocities[0]
        assert vy > 0      # tangential
        assert vx < 0      # inward pull

    def test_wave_is_vertical(self):
        engine = make_engine([[10.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.VICTORY), DT)
        vx, vy, vz = engine.velocities[0]
        assert vy != 0
        assert vx == 0 and vz == 0

    def test_orbit_pulls_toward_circle(self):
        """At phase 0 the orbit point sits 20 units above the hand."""
        engine = make_engine([[10.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.THUMBS_UP), DT)
        vx, vy, vz = engine.velocities[0]
        assert vx < 0 and vy > 0
        assert vz == 0

    def test_chaos_only_near_hand(self):
        engine = make_engine([[10.0, 0.0, 0.0], [100.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.ROCK_ON), DT)
        assert np.any(engine.velocities[0])
        assert not np.any(engine.velocities[1])

    def test_passive_repulsion_radius(self):
        """Unrecognized gestures only push particles within 15 units."""
        engine = make_engine([[10.0, 0.0, 0.0], [20.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.NONE, strength=0.0), DT)
        assert engine.positions[0, 0] > 10.0
        assert engine.positions[1, 0] == 20.0

    def test_force_table(self):
        assert FORCE_TABLE[GestureType.OPEN_HAND] is swirl
        assert FORCE_TABLE[GestureType.CLOSED_FIST] is repel
        assert FORCE_TABLE[GestureType.PINCH] is suction
        assert FORCE_TABLE[GestureType.VICTORY] is wave
        assert FORCE_TABLE[GestureType.THUMBS_UP] is orbit
        assert FORCE_TABLE[GestureType.ROCK_ON] is chaos

    @pytest.mark.parametrize("gesture_type", [GestureType.NONE, GestureType.DOUBLE_PALM])
    def test_fallback_force(self, gesture_type):
        assert force_for(gesture_type) is passive_repulse


class TestColorUpdate:
    """Test gesture-driven recoloring."""

    def test_victory_rainbow(self):
        engine = make_engine([[10.0, 0.0, 0.0], [-30.0, 60.0, 0.0]])
        engine.step(hand_state(GestureType.VICTORY, time=0.5), DT)
        expected = hsl_to_rgb(0.5 * 0.2 + np.array([10.0, -30.0]) * 0.01, 0.8, 0.6)
        np.testing.assert_allclose(engine.colors, expected, atol=1e-5)

    def test_pinch_heat(self):
        engine = make_engine([[10.0, 0.0, 0.0], [100.0, 0.0, 0.0]])
        engine.step(hand_state(GestureType.PINCH), DT)
        np.testing.assert_allclose(engine.colors[0], [1.0, 0.0, 0.0], atol=1e-6)
        fade = 1.0 - 40.0 / 101.0
        np.testing.assert_allclose(engine.colors[1], [1.0, fade, fade], atol=1e-5)

    def test_relax_by_home_side(self):
        engine = make_engine([[10.0, 0.0, 0.0], [-10.0, 0.0, 0.0]], color_relax_probability=1.0)
        engine.step(hand_state(GestureType.NONE, position=(0.0, 100.0, 0.0)), DT)
        palette = PALETTES[Theme.NEBULA]
        np.testing.assert_allclose(engine.colors[0], palette.relax_positive, atol=1e-6)
        np.testing.assert_allclose(engine.colors[1], palette.relax_negative, atol=1e-6)

    def test_relax_disabled(self):
        engine = make_engine([[10.0, 0.0, 0.0]], color_relax_probability=0.0)
        engine.step(hand_state(GestureType.OPEN_HAND), DT)
        np.testing.assert_array_equal(engine.colors, [[0.5, 0.5, 0.5]])

    def test_set_theme(self):
        engine = ParticleEngine(ParticleEngineConfig(count=500, seed=2))
        engine.set_theme(Theme.EMBER)
        assert engine.theme == Theme.EMBER
        colors = engine.colors
        np.testing.assert_allclose(colors[:, 0], 1.0)
        assert colors[:, 1].min() >= 0.3 - 1e-6 and colors[:, 1].max() <= 0.85 + 1e-6


class TestEngineConfig:

    def test_from_dict(self):
        config = ParticleEngineConfig.from_dict({"count": 100, "seed": 9, "theme": "aurora"})
        assert config.count == 100
        assert config.seed == 9
        assert config.damping == 0.92
        assert ParticleEngine(config).theme == Theme.AURORA
