import math

import numpy as np
import pytest

from skyscatter.palette import colors_for
from skyscatter.raster import Surface
from skyscatter.scene import SceneConfig, SkyRenderer, scatter_intensity, sun_position


@pytest.fixture
def bare_renderer():
    return SkyRenderer(SceneConfig(particle_count=0), rng=0)


def test_sun_starts_and_ends_on_horizon():
    assert sun_position(0, 800, 600) == pytest.approx((0.0, 540.0))
    assert sun_position(100, 800, 600) == pytest.approx((800.0, 540.0))


def test_sun_peaks_at_noon():
    assert sun_position(50, 800, 600) == pytest.approx((400.0, 120.0))


def test_sun_moves_left_to_right():
    xs = [sun_position(t, 640, 480)[0] for t in np.linspace(0, 100, 201)]
    assert all(b >= a for a, b in zip(xs, xs[1:]))


def test_sun_is_highest_at_midpoint():
    ys = [sun_position(t, 640, 480)[1] for t in np.linspace(0, 100, 201)]
    assert min(ys) == pytest.approx(sun_position(50, 640, 480)[1])


def test_intensity_falloff_bounds():
    assert scatter_intensity(0.0, 1000.0) == pytest.approx(1.0)
    assert scatter_intensity(600.0, 1000.0) == pytest.approx(0.0)
    assert scatter_intensity(900.0, 1000.0) == 0.0
    values = scatter_intensity(np.linspace(0, 2000, 501), 1000.0)
    assert np.all((values >= 0.0) & (values <= 1.0))


def test_renderer_owns_a_full_particle_field():
    renderer = SkyRenderer(rng=1)
    assert len(renderer.particles) == 150


def test_zero_area_frame_is_skipped():
    renderer = SkyRenderer(rng=1)
    before = renderer.particles.x.copy()
    assert renderer.render(Surface(), 50, 0.0) is None
    np.testing.assert_array_equal(renderer.particles.x, before)


def test_render_reports_colors_and_sun(bare_renderer):
    surface = Surface(800, 600)
    info = bare_renderer.render(surface, 50, 0.0)
    assert info.colors == colors_for(50)
    assert (info.sun_x, info.sun_y) == pytest.approx((400.0, 120.0))


def test_sky_gradient_fills_the_frame(bare_renderer):
    surface = Surface(800, 600)
    bare_renderer.render(surface, 0, 0.0)
    top = colors_for(0).top.as_unit()
    horizon = colors_for(0).horizon.as_unit()
    # far from the sun, rays and halo
    np.testing.assert_allclose(surface.pixels[0, 400], top, atol=0.01)
    np.testing.assert_allclose(surface.pixels[599, 790], horizon, atol=0.01)


def test_sun_disc_is_opaque(bare_renderer):
    surface = Surface(800, 600)
    bare_renderer.render(surface, 50, 1234.0)
    np.testing.assert_allclose(surface.pixels[120, 400], colors_for(50).sun.as_unit(), atol=1e-6)


def test_sun_border_is_lighter_than_sky(bare_renderer):
    surface = Surface(800, 600)
    bare_renderer.render(surface, 100, 0.0)
    sun_x, sun_y = sun_position(100, 800, 600)
    row = int(sun_y)
    col = int(sun_x) - 26
    # the border ring sits over the halo, whitened by the translucent stroke
    assert surface.pixels[row, col, 2] > surface.pixels[row, col - 20, 2]


def test_render_advances_particles():
    renderer = SkyRenderer(rng=5)
    before = renderer.particles.x.copy()
    renderer.render(Surface(64, 48), 30, 16.0)
    assert not np.array_equal(renderer.particles.x, before)
    assert len(renderer.particles) == 150


def test_particles_near_sun_are_drawn_in_scatter_color():
    from skyscatter.particles import Particle, ParticleField

    config = SceneConfig(particle_count=0, ray_count=0, halo_alpha=0.0, sun_radius=0.0,
                         sun_border_alpha=0.0)
    renderer = SkyRenderer(config)
    # a large particle right below the noon sun
    renderer.particles = ParticleField.from_particles([Particle(0.5, 0.3, 6.0, 1e-9, math.pi / 2)])
    surface = Surface(200, 100)
    renderer.render(surface, 50, 0.0)
    scatter = colors_for(50).scatter.as_unit()
    lit = surface.pixels[30, 100]
    sky = Surface(200, 100)
    SkyRenderer(config).render(sky, 50, 0.0)
    # brighter than the bare sky and pulled towards the scatter color
    assert np.all(np.abs(lit - scatter) <= np.abs(sky.pixels[30, 100] - scatter) + 1e-6)
    assert not np.allclose(lit, sky.pixels[30, 100])
