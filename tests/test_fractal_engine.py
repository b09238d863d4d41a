import math

import pytest

from mandel_trace.config import FractalConfig
from mandel_trace.domain.types import Color, EscapeResult
from mandel_trace.errors import NonFinitePointError
from mandel_trace.services.fractal_engine import FractalEngine, orbit
from mandel_trace.services.viewport_mapper import ViewportMapper


# --- classify ---------------------------------------------------------------
@pytest.mark.parametrize("cap", [1, 2, 10, 100, 1000])
def test_origin_is_bounded_for_any_cap(engine, cap):
    assert engine.classify(0j, cap) == EscapeResult.bounded_result()


def test_two_escapes_on_second_iteration(engine):
    # |z_1|^2 = 4 does not exceed 4, z_2 = 6 does
    assert engine.classify(complex(2.0, 0.0)) == EscapeResult.escaped_at(2)


def test_three_escapes_on_first_iteration(engine):
    assert engine.classify(complex(3.0, 0.0)) == EscapeResult.escaped_at(1)


@pytest.mark.parametrize("c", [complex(-2.0, 0.0), complex(-1.0, 0.0), 1j, -0.5])
def test_points_in_the_set_stay_bounded(engine, c):
    result = engine.classify(c)

    assert result.bounded
    assert not result.escaped


def test_cap_limits_detection(engine):
    # c = 0.26 escapes slowly, far beyond a cap of 5
    assert engine.classify(0.26, 5).bounded
    assert engine.classify(0.26, 1000).escaped


@pytest.mark.parametrize(
    "c", [complex(math.nan, 0.0), complex(0.0, math.inf), complex(-math.inf, 1.0)]
)
def test_non_finite_points_are_rejected(engine, c):
    with pytest.raises(NonFinitePointError):
        engine.classify(c)


def test_cap_must_be_positive(engine):
    with pytest.raises(ValueError):
        engine.classify(0j, 0)


def test_escape_result_rejects_iteration_zero():
    with pytest.raises(ValueError):
        EscapeResult(0)


def test_scenario_corner_and_center_differ(scenario_config, mapper):
    engine = FractalEngine(scenario_config)
    vp = scenario_config.viewport

    corner = engine.classify(mapper.map_pixel_to_complex((0, 0), vp), 100)
    center = engine.classify(mapper.map_pixel_to_complex((400, 300), vp), 100)

    assert corner != center
    assert center.bounded
    assert corner == EscapeResult.escaped_at(1)


# --- color_for --------------------------------------------------------------
@pytest.mark.parametrize("palette", ["gradient", "bands", "cyclic"])
def test_color_for_is_pure(palette):
    engine = FractalEngine(FractalConfig(max_iterations=64, palette=palette))

    for n in range(1, 65):
        result = EscapeResult.escaped_at(n)
        assert engine.color_for(result) == engine.color_for(EscapeResult(n))

    assert engine.color_for(EscapeResult.bounded_result()) == Color(0, 0, 0, 255)


def test_interior_color_comes_from_config():
    engine = FractalEngine(FractalConfig(interior_color=(10, 20, 30, 255)))

    assert engine.color_for(EscapeResult.bounded_result()) == Color(10, 20, 30, 255)


def test_gradient_separates_escapes_from_interior():
    engine = FractalEngine(FractalConfig(max_iterations=100))
    interior = engine.color_for(EscapeResult.bounded_result())

    colors = [engine.color_for(EscapeResult.escaped_at(n)) for n in range(1, 101)]

    assert interior not in colors
    assert colors[0] == Color(30, 30, 115, 255)
    assert colors[49] == Color(255, 255, 255, 255)


def test_bands_follow_upstream_thresholds():
    engine = FractalEngine(FractalConfig(max_iterations=1024, palette="bands"))

    def gray(n: int) -> int:
        return engine.color_for(EscapeResult.escaped_at(n)).r

    assert gray(1) == 255
    assert gray(3) == 150
    assert gray(5) == 64
    assert gray(10) == 32
    assert gray(20) == 16
    assert gray(100) == 0
    assert engine.color_for(EscapeResult.escaped_at(64)) == engine.color_for(
        EscapeResult.bounded_result()
    )


def test_cyclic_palette_repeats_with_period():
    engine = FractalEngine(FractalConfig(palette="cyclic", cycle_length=8))

    def color(n: int) -> Color:
        return engine.color_for(EscapeResult.escaped_at(n))

    assert color(3) == color(11)
    assert color(3) != color(4)


# --- trace_orbit ------------------------------------------------------------
def test_minus_one_cycles(engine):
    bounces = engine.trace_orbit(complex(-1.0, 0.0), 100, 6)

    assert bounces == (0, -1, 0, -1, 0, -1, 0)


def test_i_enters_two_cycle(engine):
    bounces = engine.trace_orbit(1j, 100, 5)

    assert bounces == (0, 1j, complex(-1, 1), -1j, complex(-1, 1), -1j)


def test_orbit_stops_at_escaping_iterate(engine):
    bounces = engine.trace_orbit(complex(2.0, 0.0), 100, 50)

    assert bounces == (0, 2, 6)
    assert len(bounces) == engine.classify(complex(2.0, 0.0)).iterations + 1


def test_zero_trace_length_keeps_only_start(engine):
    assert engine.trace_orbit(0.3 + 0.2j, 100, 0) == (0j,)


def test_bounded_orbit_is_capped_by_iterations(engine):
    assert engine.trace_orbit(0j, 3, 10) == (0j, 0j, 0j, 0j)


def test_trace_length_defaults_to_config(engine):
    assert len(engine.trace_orbit(-0.5)) == 16 + 1


def test_orbit_matches_manual_unrolling(engine):
    c = complex(-0.1, 0.1)
    bounces = engine.trace_orbit(c, 100, 12)

    z = 0j
    expected = [z]
    for _ in range(12):
        z = z * z + c
        expected.append(z)

    assert list(bounces) == pytest.approx(expected)


def test_trace_never_exceeds_limit_and_agrees_with_classify():
    engine = FractalEngine(FractalConfig(max_iterations=200))
    mapper = ViewportMapper(40, 30)
    vp = engine.config.viewport
    limit = 25

    for x in range(40):
        for y in range(30):
            c = mapper.map_pixel_to_complex((x, y), vp)
            bounces = engine.trace_orbit(c, 200, limit)
            result = engine.classify(c, 200)

            assert len(bounces) <= limit + 1
            if result.escaped and result.iterations <= limit:
                assert len(bounces) == result.iterations + 1
            else:
                assert len(bounces) == limit + 1


def test_trace_returns_fresh_tuples(engine):
    first = engine.trace_orbit(-1.0, 100, 4)
    second = engine.trace_orbit(-1.0, 100, 4)

    assert isinstance(first, tuple)
    assert first == second


def test_trace_rejects_non_finite_seed(engine):
    with pytest.raises(NonFinitePointError):
        engine.trace_orbit(complex(math.nan, 0.0))


def test_orbit_generator_is_lazy():
    iterates = orbit(0j, 10**9)

    assert [next(iterates) for _ in range(3)] == [0j, 0j, 0j]


def test_largest_escape_radius_still_detects_escape():
    engine = FractalEngine(FractalConfig(escape_radius=1e100, max_iterations=100))
    c = complex(1.5, 1.5)

    result = engine.classify(c)
    bounces = engine.trace_orbit(c, 100, 100)

    assert result.escaped
    assert len(bounces) == result.iterations + 1
    assert all(math.isfinite(z.real) and math.isfinite(z.imag) for z in bounces)
