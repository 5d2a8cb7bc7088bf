import pytest

from isoscene.app.state import AngleStore
from isoscene.controller.animation import ParticleAnimator, build_frame
from isoscene.controller.scene_controller import SceneController
from isoscene.model.geometry_primitives import Point3D
from isoscene.model.particles import ParticleEffect, ParticleStream, sample_route
from isoscene.model.transform import AngleConfig, iso_to_screen


def test_start_and_stop_are_idempotent(qapp, two_box_scene):
    animator = ParticleAnimator(two_box_scene, AngleStore())

    animator.start()
    animator.start()
    assert animator.is_running

    animator.stop()
    animator.stop()
    assert not animator.is_running


def test_tick_advances_with_elapsed_time(qapp, two_box_scene):
    animator = ParticleAnimator(two_box_scene, AngleStore())
    frames = []
    animator.frame_ready.connect(frames.append)

    first = animator.tick(10.0)
    (sample,) = first.particles["link"]
    assert sample.progress == 0.0
    assert sample.position == Point3D(50.0, 0.0, 25.0)
    assert sample.screen == iso_to_screen(sample.position, angles=AngleConfig())

    second = animator.tick(11.0)
    assert [s.progress for s in second.particles["link"]] == pytest.approx([0.5, 0.0])
    assert second.particles["link"][0].position.is_close(Point3D(100.0, 0.0, 25.0))
    assert frames == [first, second]


def test_tick_projects_with_latest_broadcast(qapp, two_box_scene):
    store = AngleStore()
    animator = ParticleAnimator(two_box_scene, store)
    animator.tick(0.0)

    angles = store.set_angles(rotate_z=30.0)
    frame = animator.tick(0.5)
    sample = frame.particles["link"][0]
    assert sample.screen == iso_to_screen(sample.position, angles=angles)


def test_disabled_connectors_are_not_sampled(qapp, two_box_scene):
    two_box_scene.connectors["link"].particles.enabled = False
    animator = ParticleAnimator(two_box_scene, AngleStore())
    assert animator.tick(0.0).particles == {}


def test_streams_follow_scene_content(qapp, two_box_scene):
    animator = ParticleAnimator(two_box_scene, AngleStore())
    assert set(animator.streams) == {"link"}

    two_box_scene.remove_box("b")
    assert animator.tick(0.0).particles == {}
    assert animator.streams == {}


def test_tick_follows_box_moved_through_controller(qapp, two_box_scene):
    store = AngleStore()
    controller = SceneController(two_box_scene, store)
    animator = ParticleAnimator(two_box_scene, store)
    animator.tick(0.0)

    controller.move_box("b", Point3D(200.0, 300.0, 0.0))
    frame = animator.tick(2.0)

    head = frame.particles["link"][0]
    assert head.progress == pytest.approx(1.0)
    assert head.position.is_close(Point3D(150.0, 300.0, 25.0))
    assert head.position == sample_route(two_box_scene.route_for(two_box_scene.connectors["link"]), 1.0)
    assert not head.is_reversed


def test_build_frame_with_trails(two_box_scene):
    settings = two_box_scene.connectors["link"].particles
    settings.effect = ParticleEffect.TRAIL
    streams = {"link": ParticleStream(settings=settings)}

    build_frame(two_box_scene, streams, AngleConfig(), 0.0)
    frame = build_frame(two_box_scene, streams, AngleConfig(), 0.4)

    head = frame.particles["link"][0]
    assert len(head.trail) == settings.trail_length + 1
    assert head.trail[0].position == head.position
