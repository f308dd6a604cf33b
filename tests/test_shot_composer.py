"""
Tests for deterministic shot classification and shot list building.
"""
import pytest

from agents.cinematic import (
    CameraMovement,
    CameraRig,
    ShotComposer,
    ShotType,
    build_shotlist,
    classify,
)
from agents.cinematic.shot_composer import (
    BeatFeatures,
    compute_risk_flags,
    generate_intent,
    sketch_description,
)
from models.beat import ScriptBeat

PRODUCT_FLAG = "Product beat not framed as INSERT/MCU"
DIALOGUE_WS_FLAG = "Dialogue in WS may reduce clarity"
INSERT_FLAG = "Insert beat not framed as INSERT"


def _shot(text, shot_number, scene_id="SC001", beat_id="B001_1"):
    beat = ScriptBeat(beat_id=beat_id, scene_id=scene_id, action=text)
    return ShotComposer().compose_shot(beat, shot_number).to_dict()


class TestClassify:

    def test_first_shot_is_establishing(self):
        shot_type, camera, lens = classify("Close-up of the toothpaste pack.", 1)
        assert shot_type == ShotType.WIDE
        assert camera.angle == "eye-level"
        assert lens.mm_range == "24mm"

    def test_product_close_up_is_flat_insert(self):
        shot_type, camera, lens = classify("Close-up of the toothpaste pack.", 2)
        assert shot_type == ShotType.INSERT
        assert camera.angle == "flat"
        assert camera.height == "table"
        assert lens.mm_range == "100mm"
        assert lens.rationale == "Product detail, texture"

    def test_detail_insert_is_angled(self):
        shot_type, camera, lens = classify("Her hand taps the table.", 5)
        assert shot_type == ShotType.INSERT
        assert camera.angle == "45°"
        assert camera.movement == CameraMovement.MICRO_SLIDE
        assert camera.rig == CameraRig.SLIDER_TRIPOD

    def test_close_up_only(self):
        shot_type, camera, lens = classify("Her eyes widen.", 2)
        assert shot_type == ShotType.CLOSE_UP
        assert lens.mm_range == "85mm"
        assert lens.rationale == "Emotional emphasis, isolation"

    def test_dialogue_without_action_is_mcu(self):
        shot_type, camera, lens = classify('She said, "I love this."', 3)
        assert shot_type == ShotType.MEDIUM_CLOSE_UP
        assert lens.mm_range == "50mm"
        assert camera.angle == "eye-level"

    def test_name_prefix_counts_as_dialogue(self):
        shot_type, _, _ = classify("Manager: We need this by Friday.", 2)
        assert shot_type == ShotType.MEDIUM_CLOSE_UP

    def test_action_is_low_wide_tracking(self):
        shot_type, camera, lens = classify("He runs across the field.", 4)
        assert shot_type == ShotType.WIDE
        assert camera.angle == "low"
        assert camera.movement == CameraMovement.TRACK
        assert camera.rig == CameraRig.DOLLY_GIMBAL
        assert lens.mm_range == "24mm"

    def test_product_alone_is_mcu(self):
        shot_type, _, lens = classify("The bottle sits on the shelf.", 2)
        assert shot_type == ShotType.MEDIUM_CLOSE_UP
        assert lens.mm_range == "50mm"

    def test_default_medium_shot(self):
        shot_type, camera, lens = classify("The sun sets over the city.", 2)
        assert shot_type == ShotType.MEDIUM
        assert camera.movement == CameraMovement.STATIC
        assert camera.rig == CameraRig.TRIPOD
        assert camera.height == "chest"
        assert lens.mm_range == "35mm"
        assert lens.rationale == "Natural perspective, subject focus"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_text_is_medium(self, text):
        shot_type, _, _ = classify(text, 3)
        assert shot_type == ShotType.MEDIUM

    def test_first_shot_with_empty_text(self):
        assert classify("", 1)[0] == ShotType.WIDE

    def test_matching_is_case_insensitive(self):
        assert classify("CLOSE-UP ON THE BOTTLE", 2)[0] == ShotType.INSERT

    def test_classify_is_idempotent(self):
        text = "Arshdeep rushes in holding the muesli bowl."
        assert classify(text, 7) == classify(text, 7)


class TestShotScenarios:

    def test_stare_at_bottle(self):
        shot = _shot("Arshdeep stares at the bottle.", 2)
        assert shot["shot_type"] == "INSERT"
        assert shot["camera"]["angle"] == "flat"
        assert shot["lens"]["mm_range"] == "100mm"
        assert shot["risk_flags"] == []
        assert "bottle" in shot["sketch_description"]
        assert shot["intent"] == "Show character reaction"

    def test_spoken_line(self):
        shot = _shot('She said, "I love this."', 3)
        assert shot["shot_type"] == "MCU"
        assert shot["intent"] == "Deliver dialogue / emotional beat"
        assert shot["continuity_notes"]["eyelines"] == "Match eyelines"
        assert shot["sketch_description"].startswith("Medium shot of character speaking")

    def test_running(self):
        shot = _shot("He runs across the field.", 4)
        assert shot["shot_type"] == "WS"
        assert shot["camera"]["movement"] == "track"
        assert shot["camera"]["support"] == "dolly/gimbal"
        assert shot["risk_flags"] == []
        assert shot["intent"] == "Action coverage"
        assert shot["continuity_notes"]["line_of_action"] == "Action axis maintained"
        assert shot["continuity_notes"]["match_action"] == "Cut on action"

    def test_shot_id_from_position(self):
        assert _shot("Anything.", 12)["shot_id"] == "S012"

    def test_ids_carried_from_beat(self):
        shot = _shot("Anything.", 2, scene_id="SC004", beat_id="B002_3")
        assert shot["scene_id"] == "SC004"
        assert shot["beat_id"] == "B002_3"


class TestRiskFlags:

    def test_product_in_wide_is_flagged(self):
        shot = _shot("Arshdeep is running with the bottle.", 2)
        assert shot["shot_type"] == "WS"
        assert PRODUCT_FLAG in shot["risk_flags"]

    def test_establishing_product_is_flagged(self):
        shot = _shot("Close-up of the bottle.", 1)
        assert shot["shot_type"] == "WS"
        assert shot["risk_flags"] == [PRODUCT_FLAG]

    def test_dialogue_in_wide_is_flagged(self):
        shot = _shot('Manager running: "Hurry up!"', 2)
        assert shot["shot_type"] == "WS"
        assert DIALOGUE_WS_FLAG in shot["risk_flags"]

    def test_insert_words_outside_insert_are_flagged(self):
        # Position 1 overrides the insert rule
        shot = _shot("Her hand taps the table.", 1)
        assert INSERT_FLAG in shot["risk_flags"]

    def test_several_flags_can_apply(self):
        features = BeatFeatures(product=True, dialogue=True, insert=True)
        flags = compute_risk_flags(features, ShotType.WIDE)
        assert flags == [PRODUCT_FLAG, DIALOGUE_WS_FLAG, INSERT_FLAG]

    @pytest.mark.parametrize("text,position", [
        ("The bottle sits on the shelf.", 2),
        ("Close-up of the toothpaste pack.", 2),
        ("Close-up of the toothpaste pack.", 1),
        ("Arshdeep is running with the bottle.", 3),
        ("The sun sets.", 2),
    ])
    def test_product_flag_iff_product_outside_insert_or_mcu(self, text, position):
        shot = _shot(text, position)
        has_product = BeatFeatures.from_text(text).product
        expect_flag = has_product and shot["shot_type"] not in ("INSERT", "MCU")
        assert (PRODUCT_FLAG in shot["risk_flags"]) == expect_flag


class TestDerivedFields:

    def test_intent_precedence(self):
        assert generate_intent('Arshdeep stares: "Wow."') == "Deliver dialogue / emotional beat"
        assert generate_intent("She holds the bottle.") == "Product showcase"
        assert generate_intent("She holds her breath.") == "Advance narrative"
        assert generate_intent("Running across the field.") == "Action coverage"

    def test_continuity_defaults(self):
        shot = _shot("The sun sets over the city.", 2)
        assert shot["continuity_notes"] == {
            "line_of_action": "Standard",
            "eyelines": "N/A",
            "match_action": "N/A",
            "props_wardrobe": "Check continuity",
        }

    def test_props_note_for_product(self):
        shot = _shot("The bottle sits on the shelf.", 2)
        assert shot["continuity_notes"]["props_wardrobe"] == "Hero product visible"

    def test_sketch_uses_known_subject(self):
        assert sketch_description("Arshdeep frowns.", ShotType.CLOSE_UP).startswith(
            "Close-up on Arshdeep's face"
        )

    def test_insert_sketch_without_product_noun(self):
        assert sketch_description("Milk splashes.", ShotType.INSERT).startswith(
            "Insert/macro of product"
        )

    def test_wide_sketch(self):
        assert sketch_description("He runs.", ShotType.WIDE).startswith("Wide shot of character")

    def test_medium_sketch_truncates_long_text(self):
        text = "The Manager stands by the window thinking about the quarterly numbers again"
        desc = sketch_description(text, ShotType.MEDIUM)
        assert desc == f"Medium shot of Manager: {text[:60]}…"

    def test_medium_sketch_empty_text(self):
        assert sketch_description("", ShotType.MEDIUM) == "Medium shot of character"


class TestBuildShotlist:

    def test_numbers_across_scenes(self):
        structured = {
            "scenes": [
                {"scene_id": "SC001", "beats": [
                    {"beat_id": "B001_1", "action": "A kitchen at dawn."},
                    {"beat_id": "B001_2", "action": "Arshdeep stares at the bottle."},
                ]},
                {"scene_id": "SC002", "beats": [
                    {"beat_id": "B001_1", "text": "He runs across the field."},
                ]},
            ]
        }
        shots = build_shotlist(structured)["shots"]

        assert [s["shot_id"] for s in shots] == ["S001", "S002", "S003"]
        assert [s["scene_id"] for s in shots] == ["SC001", "SC001", "SC002"]
        assert [s["shot_type"] for s in shots] == ["WS", "INSERT", "WS"]
        assert shots[2]["action"] == "He runs across the field."

    def test_empty_script(self):
        assert build_shotlist({"scenes": []}) == {"shots": []}
        assert build_shotlist({}) == {"shots": []}

    def test_deterministic(self):
        structured = {"scenes": [{"scene_id": "SC001", "beats": [
            {"beat_id": "B1", "action": "She holds the pack."},
            {"beat_id": "B2", "action": '"Try it," she says.'},
        ]}]}
        assert build_shotlist(structured) == build_shotlist(structured)
