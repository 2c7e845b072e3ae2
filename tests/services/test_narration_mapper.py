"""
Tests for the narration heuristics: acting suggestions, durations, mood,
SFX keywords and transitions.
"""

import pytest

from models.enums import Mood, SceneTransitionType
from models.scene import Scene, SceneCharacter
from services.narration_mapper import (
    analyze_narration_for_actions,
    apply_auto_durations,
    auto_enhance_scene,
    calculate_scene_duration,
    count_words,
    detect_actions_for_sfx,
    detect_mood,
    generate_transition,
    has_dialogue,
    scene_character_from_story,
)


def _suggest(text):
    suggestions = analyze_narration_for_actions(text)
    assert len(suggestions) == 1
    return suggestions[0]


class TestActingSuggestions:

    def test_dialogue_talks(self):
        """Quoted speech and a speech verb give talk"""
        s = _suggest('She said "hello!"')
        assert s.suggested_action == "talk"
        assert s.is_talking is True
        assert s.suggested_expression == "neutral"

    def test_dance_and_happy_stem(self):
        """'happily' matches the happy keyword through the y->i stem"""
        s = _suggest("They danced and laughed happily")
        assert s.suggested_action == "dance"
        assert s.suggested_expression == "happy"
        assert s.is_talking is False

    def test_table_order_wins(self):
        assert _suggest("They run and jump").suggested_action == "walk"
        assert _suggest("They jumped and waved").suggested_action == "jump"

    def test_quotes_turn_idle_into_talk(self):
        s = _suggest('"Good morning"')
        assert s.suggested_action == "talk"
        assert s.is_talking is True

    def test_quotes_keep_other_actions(self):
        s = _suggest('He jumped up. "Wow!"')
        assert s.suggested_action == "jump"
        assert s.is_talking is True
        assert s.suggested_expression == "surprised"

    def test_curly_quotes_count_as_dialogue(self):
        assert has_dialogue("“Hi there”")
        assert has_dialogue("‘Hi there’")

    def test_single_quotes_and_apostrophes_count_as_dialogue(self):
        s = _suggest("Mia's kite flew over the hill")
        assert (s.suggested_action, s.is_talking) == ("talk", True)
        assert has_dialogue("'Come here,' she whispered")
        assert not has_dialogue("The clouds drifted by.")

    def test_nothing_matches(self):
        s = _suggest("The clouds drifted by.")
        assert (s.suggested_action, s.suggested_expression, s.is_talking) == ("idle", "neutral", False)

    def test_case_insensitive(self):
        assert _suggest("KIARA WAVED").suggested_action == "wave"


class TestDuration:

    def test_ten_words(self):
        text = "one two three four five six seven eight nine ten"
        assert calculate_scene_duration(text) == pytest.approx(10 / 130 * 60000 + 2000)

    def test_empty_narration_gets_minimum(self):
        assert calculate_scene_duration("") == 4000
        assert calculate_scene_duration("   ") == 4000

    def test_empty_narration_is_zero_words(self):
        assert count_words("") == 0
        assert count_words("  \n ") == 0
        assert calculate_scene_duration("", min_duration=0) == 2000

    def test_short_narration_gets_minimum(self):
        assert calculate_scene_duration("Hello there") == 4000

    def test_custom_parameters(self):
        text = " ".join(["word"] * 60)
        assert calculate_scene_duration(text, min_duration=0, words_per_minute=60, buffer_ms=0) == 60000

    def test_apply_auto_durations_returns_new_scenes(self):
        scenes = [Scene(id="a", narration=" ".join(["w"] * 26), duration=1)]
        updated = apply_auto_durations(scenes)
        assert updated[0].duration == pytest.approx(26 / 130 * 60000 + 2000)
        assert scenes[0].duration == 1


class TestAutoEnhance:

    def test_lead_takes_suggestion_and_others_idle_while_talking(self):
        scene = Scene(id="s", narration='"Hi!" said Kiara', characters=[
            SceneCharacter(id="a", rig_id="kiara", animation="walk"),
            SceneCharacter(id="b", rig_id="jayden", animation="dance", expression="sad"),
        ])

        enhanced = auto_enhance_scene(scene)

        lead, other = enhanced.characters
        assert (lead.animation, lead.expression, lead.is_talking) == ("talk", "neutral", True)
        assert (other.animation, other.expression) == ("idle", "sad")

    def test_others_turn_happy_with_happy_suggestion(self):
        scene = Scene(id="s", narration="Everyone was happy", characters=[
            SceneCharacter(id="a", rig_id="kiara"),
            SceneCharacter(id="b", rig_id="jayden", animation="dance"),
        ])

        other = auto_enhance_scene(scene).characters[1]

        assert (other.animation, other.expression) == ("dance", "happy")

    def test_input_scene_is_untouched(self):
        scene = Scene(id="s", narration="She jumped", characters=[SceneCharacter(id="a", rig_id="kiara")])
        auto_enhance_scene(scene)
        assert scene.characters[0].animation == "idle"

    def test_no_characters(self):
        scene = Scene(id="s", narration="She jumped")
        assert auto_enhance_scene(scene) is scene


class TestMoodAndSfx:

    @pytest.mark.parametrize("text, mood", [
        ("What a happy, fun day", Mood.HAPPY),
        ("She began to cry, so lonely", Mood.SAD),
        ("An amazing adventure", Mood.EXCITING),
        ("A peaceful, quiet night", Mood.CALM),
        ("A secret door, hidden away", Mood.MYSTERIOUS),
        ("The bus arrived", Mood.NEUTRAL),
        ("", Mood.NEUTRAL),
    ])
    def test_detect_mood(self, text, mood):
        assert detect_mood(text) == mood

    def test_mood_tie_goes_to_earlier_mood(self):
        assert detect_mood("sad but happy") == Mood.HAPPY

    def test_sfx_actions_in_table_order(self):
        text = "Then they began to run, jumped high and walked home"
        assert detect_actions_for_sfx(text) == ["jump", "walk", "run"]

    def test_no_sfx(self):
        assert detect_actions_for_sfx("The moon shone") == []


class TestTransitions:

    @staticmethod
    def _scene(background):
        return Scene(id=background, background=background)

    def test_same_background_fades(self):
        t = generate_transition(self._scene("park"), self._scene("park"))
        assert (t.type, t.duration) == (SceneTransitionType.FADE, 500)

    @pytest.mark.parametrize("a, b", [("meadow", "night"), ("night", "bedroom")])
    def test_night_fades_slowly(self, a, b):
        t = generate_transition(self._scene(a), self._scene(b))
        assert (t.type, t.duration) == (SceneTransitionType.FADE, 1000)

    def test_bedroom_slides_left(self):
        t = generate_transition(self._scene("park"), self._scene("bedroom"))
        assert (t.type, t.duration, t.direction) == (SceneTransitionType.SLIDE, 600, "left")

    def test_other_backgrounds_fade(self):
        t = generate_transition(self._scene("park"), self._scene("beach"))
        assert (t.type, t.duration) == (SceneTransitionType.FADE, 500)


class TestStoryCharacters:

    def test_placement_and_action(self):
        char = scene_character_from_story("Whiskers", "right", "", "run", index=1, scene_index=2)
        assert char.id == "char-2-1"
        assert char.rig_id == "whiskers"
        assert (char.x, char.flip) == (75, True)
        assert (char.animation, char.expression) == ("walk", "happy")

    def test_expression_override_and_defaults(self):
        char = scene_character_from_story("a puppy", "nowhere", "Curious", "fly")
        assert char.rig_id == "buddy"
        assert char.x == 50
        assert (char.animation, char.expression) == ("idle", "surprised")
