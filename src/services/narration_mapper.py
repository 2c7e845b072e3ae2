"""
Narration-to-acting mapper

Pure keyword heuristics over narration text: acting suggestions, scene
duration, mood, SFX triggers and scene transitions. Every function is a
pure function of its input; suggestions are returned, never applied
implicitly.

Keyword tables are scanned in declaration order and the first entry that
appears anywhere in the text wins. The order is part of the contract:
"They run and jump" suggests walk because "run" precedes "jump".
"""

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from models.enums import Mood, SceneTransitionType, SFXType
from models.scene import ActingSuggestion, Scene, SceneCharacter, SceneTransition
from rig.registry import find_character_rig
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.NARRATION)

WORDS_PER_MINUTE = 130
DURATION_BUFFER_MS = 2000
MIN_SCENE_DURATION_MS = 4000

# (keyword, action), first match in this order wins
ACTION_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("walk", "walk"),
    ("run", "walk"),
    ("jump", "jump"),
    ("wave", "wave"),
    ("dance", "dance"),
    ("sit", "sit"),
    ("play", "dance"),
    ("explore", "walk"),
    ("discover", "surprised"),
    ("found", "surprised"),
    ("said", "talk"),
    ("asked", "talk"),
    ("replied", "talk"),
    ("exclaimed", "talk"),
    ("whispered", "talk"),
    ("shouted", "talk"),
    ("laughed", "dance"),
    ("smiled", "idle"),
    ("cried", "sad"),
    ("hugged", "wave"),
)

EXPRESSION_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("happy", "happy"),
    ("excited", "happy"),
    ("joy", "happy"),
    ("glad", "happy"),
    ("delighted", "happy"),
    ("sad", "sad"),
    ("unhappy", "sad"),
    ("upset", "sad"),
    ("disappointed", "sad"),
    ("surprised", "surprised"),
    ("amazed", "surprised"),
    ("shocked", "surprised"),
    ("wow", "surprised"),
    ("angry", "angry"),
    ("mad", "angry"),
    ("furious", "angry"),
    ("scared", "surprised"),
    ("afraid", "surprised"),
    ("worried", "sad"),
)

# Any quotation mark, single or double, straight or curly. Apostrophes in
# contractions and possessives count too.
QUOTE_CHARS = ('"', "'", "“", "”", "‘", "’")

MOOD_KEYWORDS: Tuple[Tuple[Mood, Tuple[str, ...]], ...] = (
    (Mood.HAPPY, ("happy", "joy", "laugh", "smile", "fun", "play", "excited", "wonderful", "great")),
    (Mood.SAD, ("sad", "cry", "tears", "lonely", "miss", "sorry", "upset")),
    (Mood.EXCITING, ("adventure", "discover", "explore", "amazing", "incredible", "wow", "surprise")),
    (Mood.CALM, ("peaceful", "quiet", "gentle", "soft", "sleep", "rest", "calm")),
    (Mood.MYSTERIOUS, ("mystery", "secret", "hidden", "strange", "wonder", "magic")),
)

# Narration keyword -> sound effect
ACTION_SFX: Dict[str, SFXType] = {
    "jump": SFXType.BOING,
    "walk": SFXType.FOOTSTEPS,
    "run": SFXType.FOOTSTEPS_FAST,
    "laugh": SFXType.GIGGLE,
    "cry": SFXType.SOB,
    "wave": SFXType.WHOOSH,
    "dance": SFXType.MUSIC_NOTE,
    "eat": SFXType.MUNCH,
    "sleep": SFXType.SNORE,
    "surprise": SFXType.GASP,
    "clap": SFXType.CLAP,
    "splash": SFXType.SPLASH,
}

# Story character action -> (animation, default expression)
ACTION_ANIMATION_MAP: Dict[str, Tuple[str, str]] = {
    # Movement
    "idle": ("idle", "neutral"),
    "stand": ("idle", "neutral"),
    "walk": ("walk", "neutral"),
    "run": ("walk", "happy"),
    "jump": ("jump", "happy"),
    "sit": ("sit", "neutral"),
    # Interaction
    "wave": ("wave", "happy"),
    "talk": ("talk", "neutral"),
    "dance": ("dance", "happy"),
    "play": ("dance", "happy"),
    # Emotional
    "happy": ("idle", "happy"),
    "sad": ("sad", "sad"),
    "surprised": ("surprised", "surprised"),
    "angry": ("idle", "angry"),
    "excited": ("jump", "happy"),
    "scared": ("surprised", "surprised"),
    "thinking": ("idle", "neutral"),
    "sleeping": ("sit", "neutral"),
    # Story
    "explore": ("walk", "happy"),
    "discover": ("surprised", "surprised"),
    "celebrate": ("dance", "happy"),
    "greet": ("wave", "happy"),
    "listen": ("idle", "neutral"),
    "help": ("wave", "happy"),
    "share": ("wave", "happy"),
    "learn": ("idle", "happy"),
}

# Stage position name -> (x %, y %, flip)
POSITION_MAP: Dict[str, Tuple[float, float, bool]] = {
    "left": (25, 75, False),
    "center": (50, 75, False),
    "right": (75, 75, True),
    "far-left": (15, 75, False),
    "far-right": (85, 75, True),
}

EXPRESSION_MAP: Dict[str, str] = {
    "neutral": "neutral",
    "happy": "happy",
    "sad": "sad",
    "surprised": "surprised",
    "angry": "angry",
    "excited": "happy",
    "scared": "surprised",
    "worried": "sad",
    "curious": "surprised",
    "proud": "happy",
    "shy": "neutral",
    "sleepy": "neutral",
}


def _mentions(text: str, keyword: str) -> bool:
    """Substring match, also accepting the y->i stem (happy -> happily)"""
    if keyword in text:
        return True
    return keyword.endswith("y") and len(keyword) > 3 and keyword[:-1] + "i" in text


def _first_match(text: str, table: Sequence[Tuple[str, str]]) -> Optional[str]:
    for keyword, result in table:
        if _mentions(text, keyword):
            return result
    return None


def has_dialogue(narration: str) -> bool:
    return any(q in narration for q in QUOTE_CHARS)


def analyze_narration_for_actions(narration: str) -> List[ActingSuggestion]:
    """
    Acting suggestion for a narration string

    Always returns exactly one suggestion. Quoted speech forces
    is_talking, and turns an idle suggestion into talk.
    """
    lower = narration.lower()

    action = _first_match(lower, ACTION_KEYWORDS) or "idle"
    expression = _first_match(lower, EXPRESSION_KEYWORDS) or "neutral"
    is_talking = action == "talk"

    if has_dialogue(narration):
        is_talking = True
        if action == "idle":
            action = "talk"

    return [ActingSuggestion(
        suggested_action=action,
        suggested_expression=expression,
        is_talking=is_talking,
    )]


def count_words(narration: str) -> int:
    """
    Whitespace-separated words

    Empty or blank narration is 0 words (not 1), so with a small
    min_duration it lasts just the buffer.
    """
    return len(narration.split())


def calculate_scene_duration(
    narration: str,
    min_duration: float = MIN_SCENE_DURATION_MS,
    words_per_minute: float = WORDS_PER_MINUTE,
    buffer_ms: float = DURATION_BUFFER_MS,
) -> float:
    """
    Scene length in ms: speaking time at words_per_minute plus a buffer,
    never below min_duration

    10 words -> 10/130 * 60000 + 2000 ~= 6615ms
    """
    speaking_time = count_words(narration) / words_per_minute * 60_000
    return max(min_duration, speaking_time + buffer_ms)


def auto_enhance_scene(scene: Scene) -> Scene:
    """
    Apply the narration suggestion to a scene

    The lead (first) character takes the suggested action, expression and
    talking state. Everyone else goes idle while the lead talks, and turns
    happy only when the suggestion is happy.
    """
    if not scene.characters:
        return scene

    suggestion = analyze_narration_for_actions(scene.narration)[0]
    characters: List[SceneCharacter] = []

    for index, char in enumerate(scene.characters):
        if index == 0:
            characters.append(replace(
                char,
                animation=suggestion.suggested_action,
                expression=suggestion.suggested_expression,
                is_talking=suggestion.is_talking,
            ))
        else:
            characters.append(replace(
                char,
                animation="idle" if suggestion.is_talking else char.animation,
                expression="happy" if suggestion.suggested_expression == "happy" else char.expression,
            ))

    log.debug(
        "Scene enhanced",
        scene=scene.id,
        action=suggestion.suggested_action,
        expression=suggestion.suggested_expression,
        talking=suggestion.is_talking,
    )
    return scene.with_changes(characters=characters)


def apply_auto_durations(scenes: Sequence[Scene], min_duration: float = MIN_SCENE_DURATION_MS) -> List[Scene]:
    """Recompute every scene's duration from its current narration"""
    return [
        s.with_changes(duration=calculate_scene_duration(s.narration, min_duration))
        for s in scenes
    ]


def detect_mood(narration: str) -> Mood:
    """Mood with the most keyword hits; earlier moods win ties, neutral if none"""
    lower = narration.lower()
    best, best_score = Mood.NEUTRAL, 0
    for mood, words in MOOD_KEYWORDS:
        score = sum(1 for w in words if w in lower)
        if score > best_score:
            best, best_score = mood, score
    return best


def detect_actions_for_sfx(narration: str) -> List[str]:
    """Every SFX keyword contained in the narration, in table order"""
    lower = narration.lower()
    return [action for action in ACTION_SFX if action in lower]


def generate_transition(from_scene: Scene, to_scene: Scene) -> SceneTransition:
    """
    Transition between two consecutive scenes

    same background -> fade 500ms
    into/out of night -> fade 1000ms
    into/out of bedroom -> slide left 600ms
    otherwise -> fade 500ms
    """
    a, b = from_scene.background, to_scene.background
    if a == b:
        return SceneTransition(SceneTransitionType.FADE, 500)
    if (a == "night") != (b == "night"):
        return SceneTransition(SceneTransitionType.FADE, 1000)
    if (a == "bedroom") != (b == "bedroom"):
        return SceneTransition(SceneTransitionType.SLIDE, 600, "left")
    return SceneTransition(SceneTransitionType.FADE, 500)


def scene_character_from_story(
    name: str,
    position: str = "center",
    expression: str = "",
    action: str = "idle",
    index: int = 0,
    scene_index: int = 0,
) -> SceneCharacter:
    """
    Place a story character (free-form name, position, expression, action)
    on stage using the closest built-in rig
    """
    rig = find_character_rig(name)
    x, y, flip = POSITION_MAP.get(position.lower(), POSITION_MAP["center"])
    animation, default_expression = ACTION_ANIMATION_MAP.get(action.lower(), ACTION_ANIMATION_MAP["idle"])

    return SceneCharacter(
        id=f"char-{scene_index}-{index}",
        rig_id=rig.id,
        x=x,
        y=y,
        flip=flip,
        animation=animation,
        expression=EXPRESSION_MAP.get(expression.lower(), default_expression),
    )
