"""Tests for the Prompt Composer."""
import pytest

from conftest import PALETTE, STYLE
from models.pipeline import ASSET_TYPES, PreviousAsset
from models.templates import ContentTemplate, built_in_template
from pipeline.prompts import business_name, compose_prompt, render_brief

_ANSWERS = {"business_name": "Test Auto Shop"}


class TestComposePrompt:
    @pytest.mark.parametrize("asset_type", ASSET_TYPES)
    def test_prompt_carries_business_context(self, auto_template, asset_type):
        prompt = compose_prompt(asset_type, auto_template, _ANSWERS, STYLE, PALETTE)
        assert "Test Auto Shop" in prompt
        assert "automotive" in prompt
        assert "#3B82F6, #1E40AF" in prompt
        assert "modern minimal" in prompt  # style id with hyphens replaced

    def test_prompts_name_their_asset_kind(self, auto_template):
        background = compose_prompt("background", auto_template, _ANSWERS, STYLE, PALETTE)
        logo = compose_prompt("logo", auto_template, _ANSWERS, STYLE, PALETTE)
        assert "background" in background
        assert "logo" in logo
        assert background != logo

    def test_background_uses_industry_scene(self, auto_template):
        prompt = compose_prompt("background", auto_template, _ANSWERS, STYLE, PALETTE)
        assert "dealership showroom backdrop" in prompt

    def test_unknown_industry_falls_back_to_business_scene(self):
        template = ContentTemplate(id="t", name="T", industry="aerospace")
        prompt = compose_prompt("background", template, _ANSWERS, STYLE, PALETTE)
        assert "corporate office backdrop" in prompt
        assert "aerospace" in prompt

    def test_unknown_style_uses_generic_modifiers(self, auto_template):
        prompt = compose_prompt("logo", auto_template, _ANSWERS, "retro-neon", PALETTE)
        assert "clean symbol logo" in prompt
        assert "retro neon aesthetic" in prompt

    def test_no_coordination_sentence_without_previous_assets(self, auto_template):
        prompt = compose_prompt("logo", auto_template, _ANSWERS, STYLE, PALETTE)
        assert "Building upon" not in prompt

    def test_previous_assets_are_named_in_order(self, auto_template):
        previous = [
            PreviousAsset(type="background", style=STYLE),
            PreviousAsset(type="logo", style=STYLE),
        ]
        prompt = compose_prompt("text-overlay", auto_template, _ANSWERS, STYLE, PALETTE, previous)
        assert "Building upon the existing background, logo elements" in prompt

    def test_template_brief_is_appended(self):
        template = built_in_template("restaurant")
        answers = {
            "restaurant_name": "Bella Vista",
            "dining_style": "Casual Dining",
            "cuisine_type": "Italian",
            "specialties": "Wood-fired pizza",
        }
        prompt = compose_prompt("background", template, answers, STYLE, PALETTE)
        assert "Business context: Bella Vista, a Casual Dining Italian restaurant." in prompt


class TestBusinessName:
    def test_prefers_business_name(self):
        assert business_name({"business_name": "A", "store_name": "B"}) == "A"

    def test_falls_back_through_known_keys(self):
        assert business_name({"store_name": "Corner Shop"}) == "Corner Shop"
        assert business_name({"restaurant_name": "Bella Vista"}) == "Bella Vista"

    def test_blank_answer_is_skipped(self):
        assert business_name({"business_name": "  ", "store_name": "Corner Shop"}) == "Corner Shop"

    def test_default(self):
        assert business_name({}) == "Business"


class TestRenderBrief:
    def test_lists_are_joined_and_missing_answers_blank(self):
        template = built_in_template("automotive")
        brief = render_brief(template, {
            "business_name": "Smith Auto",
            "vehicle_type": "Used Cars",
            "key_features": ["Best Prices", "Financing Available"],
        })
        assert brief.startswith("Smith Auto, specializing in Used Cars.")
        assert "Key features: Best Prices, Financing Available." in brief
        assert brief.endswith("Special offers:")

    def test_empty_template_renders_nothing(self, auto_template):
        assert render_brief(auto_template, _ANSWERS) == ""
