"""
Tests for editor-facing pydantic schemas and their conversion to domain objects.
"""

import pytest
from pydantic import ValidationError

from models.enums import CameraEasing, Mood, SceneTransitionType
from models.scene import AudioSettings
from schemas.scene import AudioSettingsUpdate, SceneCharacterSchema, SceneSchema


EDITOR_SCENE = {
    "id": "s1",
    "narration": "Kiara waves hello",
    "background": "park",
    "mood": "Happy",
    "characters": [
        {"id": "c1", "characterId": "kiara", "animation": "wave", "isTalking": True, "flip": True},
        {"id": "c2", "characterId": "buddy", "x": 20},
    ],
    "cameraKeyframes": [
        {"time": 0},
        {"time": 1000, "zoom": 1.5, "panX": 10, "easing": "ease-out"},
    ],
    "transition": {"type": "slide", "direction": "left"},
    "editorOnly": {"selected": True},
}


class TestSceneSchema:

    def test_camel_case_to_domain(self):
        scene = SceneSchema.model_validate(EDITOR_SCENE).to_domain()

        assert scene.mood == Mood.HAPPY
        assert scene.background == "park"
        assert scene.duration is None

        lead, dog = scene.characters
        assert (lead.rig_id, lead.is_talking, lead.flip) == ("kiara", True, True)
        assert (dog.rig_id, dog.x, dog.y) == ("buddy", 20, 70.0)

        assert [k.time for k in scene.camera_keyframes] == [0, 1000]
        assert scene.camera_keyframes[1].pan_x == 10
        assert scene.camera_keyframes[1].easing == CameraEasing.EASE_OUT
        assert scene.transition.type == SceneTransitionType.SLIDE
        assert scene.transition.duration == 500.0

    def test_snake_case_accepted(self):
        character = SceneCharacterSchema.model_validate({"id": "c", "rig_id": "luna", "is_talking": True})
        assert character.to_domain().rig_id == "luna"
        assert character.to_domain().is_talking

    @pytest.mark.parametrize("mood, expected", [
        ("calm", Mood.CALM),
        ("MYSTERIOUS", Mood.MYSTERIOUS),
        ("grumpy", Mood.NEUTRAL),
        (None, Mood.NEUTRAL),
    ])
    def test_mood_parsing(self, mood, expected):
        assert SceneSchema(id="s", mood=mood).to_domain().mood == expected

    def test_missing_camera_keyframes_stay_none(self):
        assert SceneSchema(id="s").to_domain().camera_keyframes is None

    def test_duplicate_character_ids(self):
        data = {"id": "s", "characters": [
            {"id": "c", "characterId": "kiara"},
            {"id": "c", "characterId": "luna"},
        ]}
        with pytest.raises(ValidationError, match="unique"):
            SceneSchema.model_validate(data)

    @pytest.mark.parametrize("bad", [
        {"id": "s", "duration": 0},
        {"id": "s", "characters": [{"id": "c", "characterId": "kiara", "scale": -1}]},
        {"id": "s", "cameraKeyframes": [{"time": -5}]},
        {"id": "s", "cameraKeyframes": [{"time": 0, "easing": "wobble"}]},
    ])
    def test_invalid_values(self, bad):
        with pytest.raises(ValidationError):
            SceneSchema.model_validate(bad)


class TestAudioSettingsUpdate:

    def test_only_sent_fields(self):
        update = AudioSettingsUpdate.model_validate({"musicVolume": 0.2, "autoNarration": False})
        assert update.to_changes() == {"music_volume": 0.2, "auto_narration": False}

    def test_apply_to_settings(self):
        settings = AudioSettings()
        changed = AudioSettingsUpdate(sfx_volume=0.9).apply_to(settings)

        assert changed == ["sfx_volume"]
        assert settings.sfx_volume == 0.9
        assert settings.master_volume == 0.8

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            AudioSettingsUpdate.model_validate({"bassBoost": 1})

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            AudioSettingsUpdate.model_validate({"masterVolume": 1.5})
