"""
Tests for action clips sampled onto rigs.
"""

import pytest

from animations.clips import (
    CLIPS,
    get_clip_for_action,
    sample_action,
    sample_clip,
    talk_mouth_shape,
)
from animations.interpolation import MOTION_PRESETS
from models.enums import MouthShape
from models.vector import Vector2
from rig.registry import get_character_rig


@pytest.fixture
def kiara():
    return get_character_rig("kiara")


@pytest.fixture
def whiskers():
    return get_character_rig("whiskers")


class TestClipLookup:

    @pytest.mark.parametrize("action", ["idle", "walk", "run", "jump", "wave", "talk", "sit", "dance"])
    def test_human_actions(self, action):
        assert get_clip_for_action(action).id == action

    @pytest.mark.parametrize("action, clip_id", [
        ("idle", "animal_idle"),
        ("walk", "animal_walk"),
        ("run", "animal_walk"),
        ("jump", "animal_jump"),
        ("wave", "wave"),
    ])
    def test_animal_variants(self, action, clip_id):
        assert get_clip_for_action(action, is_animal=True).id == clip_id

    def test_unknown_action_idles(self):
        assert get_clip_for_action("juggle").id == "idle"
        assert get_clip_for_action("juggle", is_animal=True).id == "animal_idle"

    def test_case_insensitive(self):
        assert get_clip_for_action("WALK").id == "walk"

    def test_every_clip_track_is_time_ordered(self):
        for clip in CLIPS.values():
            for track in clip.tracks:
                times = [kf.time for kf in track.keyframes]
                assert times == sorted(times), f"{clip.id}/{track.part_id}"
                assert times[-1] <= clip.duration


class TestSampleClip:

    def test_rotation_track_replaces_default(self, kiara):
        walk = CLIPS["walk"]
        assert sample_clip(walk, kiara, 0)["leftLeg"].rotation == pytest.approx(-30)
        assert sample_clip(walk, kiara, 400)["leftLeg"].rotation == pytest.approx(30)

    def test_position_track_is_offset(self, kiara):
        body_default = kiara.get_part("body").default_transform.position
        overrides = sample_clip(CLIPS["walk"], kiara, 200)
        assert overrides["body"].position == body_default + Vector2(2, -6)

    def test_rotation_and_position_on_same_part(self, kiara):
        overrides = sample_clip(CLIPS["walk"], kiara, 200)
        assert overrides["body"].rotation == pytest.approx(3)

    def test_pivot_is_kept(self, kiara):
        overrides = sample_clip(CLIPS["walk"], kiara, 100)
        assert overrides["leftArm"].pivot == kiara.get_part("leftArm").default_transform.pivot

    def test_looping_clip_wraps(self, kiara):
        walk = CLIPS["walk"]
        assert sample_clip(walk, kiara, 1200) == sample_clip(walk, kiara, 400)

    def test_one_shot_clip_holds_last_pose(self, kiara):
        jump = CLIPS["jump"]
        assert sample_clip(jump, kiara, 5000) == sample_clip(jump, kiara, 1000)

    def test_missing_parts_are_skipped(self, whiskers):
        assert sample_clip(CLIPS["wave"], whiskers, 300) == {}

    def test_animal_clip_on_animal_rig(self, whiskers):
        overrides = sample_action("walk", whiskers, 0, is_animal=True)
        assert overrides["frontLeftLeg"].rotation == pytest.approx(-25)
        assert overrides["tail"].rotation == pytest.approx(-30)

    def test_sample_action_uses_action_curve(self, kiara):
        expected = sample_clip(CLIPS["walk"], kiara, 130, MOTION_PRESETS["smooth"])
        assert sample_action("walk", kiara, 130) == expected

    def test_rig_is_not_mutated(self, kiara):
        before = dict(kiara.parts)
        sample_action("dance", kiara, 700)
        assert dict(kiara.parts) == before


class TestTalkCycle:

    @pytest.mark.parametrize("time, shape", [
        (0, MouthShape.CLOSED),
        (150, MouthShape.OPEN),
        (250, MouthShape.WIDE),
        (399, MouthShape.OH),
        (400, MouthShape.EE),
        (599, MouthShape.OPEN),
        (650, MouthShape.CLOSED),
    ])
    def test_shapes(self, time, shape):
        assert talk_mouth_shape(time) == shape
