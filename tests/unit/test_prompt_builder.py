"""Tests unitaires pour la construction des prompts."""

import pytest

from chicpic.generation.prompt_builder import (
    CATALOG_LINE,
    FINAL_INSTRUCTION,
    AssetType,
    LookMode,
    build_catalog_prompt,
    build_edit_prompt,
    build_garment_description,
    build_model_description,
    build_prompt,
    build_video_fallback_prompt,
    build_video_prompt,
    enhance_garment_description,
    look_context,
    sanitize_model_description,
    text_only_look_description,
    validate_edit_prompt,
    validate_model_description,
)


@pytest.mark.unit
class TestBuildPrompt:
    """Tests pour build_prompt."""

    def test_garment_prompt_sections(self):
        """Test les sections du prompt vêtement."""
        prompt = build_prompt(AssetType.GARMENT, "CAMISETA: Básica | Color principal: rojo")

        assert prompt.startswith("CREATE IMAGE: Professional children's fashion catalog photography")
        assert "SPECIFIC REQUIREMENTS: Children's clothing item. Children's CAMISETA: Básica. Primary color: rojo." in prompt
        assert prompt.endswith(FINAL_INSTRUCTION)
        assert "ADDITIONAL CONTEXT" not in prompt

    def test_unstructured_garment_description(self):
        """Test une description de vêtement non structurée."""
        assert enhance_garment_description("red t-shirt") == "Children's clothing item. red t-shirt"

    def test_garment_sizes_and_details(self):
        """Test les tailles et détails d'un vêtement."""
        enhanced = enhance_garment_description(
            "PANTALON: Vaquero | Tallas disponibles: S, M | Descripción: algodón suave"
        )
        assert "Available sizes for children: S, M." in enhanced
        assert "Details for children's clothing: algodón suave." in enhanced

    def test_additional_context_before_final_instruction(self):
        """Test que le contexte additionnel précède l'instruction finale."""
        prompt = build_prompt("garment", "jeans", additional_context="summer collection")
        sections = prompt.split("\n\n")
        assert sections[-2] == "ADDITIONAL CONTEXT: summer collection"
        assert sections[-1] == FINAL_INSTRUCTION

    def test_string_asset_type_accepted(self):
        """Test qu'un type d'asset en chaîne est accepté."""
        assert build_prompt("look", "outfit") == build_prompt(AssetType.LOOK, "outfit")

    def test_invalid_attempt_number(self):
        """Test le rejet d'un numéro de tentative invalide."""
        with pytest.raises(ValueError):
            build_prompt(AssetType.GARMENT, "shirt", attempt_number=0)

    def test_unknown_asset_type(self):
        """Test le rejet d'un type d'asset inconnu."""
        with pytest.raises(ValueError):
            build_prompt("shoe", "sneakers")

    @pytest.mark.parametrize(
        "attempt,marker",
        [
            (1, "Professional full body fashion model for premium catalog photography"),
            (2, "Full body fashion model for high-end catalog"),
            (3, "Full body fashion model photo."),
            (7, "Full body fashion model photo."),
        ],
    )
    def test_model_prompt_ladder(self, attempt, marker):
        """Test l'échelle des prompts modèle selon la tentative."""
        prompt = build_prompt(AssetType.MODEL, "Niña de 8 años", attempt_number=attempt)
        assert prompt.startswith(f"CREATE IMAGE: {marker}")
        assert "Model description: Niña de 8 años" in prompt
        assert CATALOG_LINE in prompt
        assert prompt.endswith("Generate the fashion model photo now.")

    def test_model_prompt_sanitized(self):
        """Test la neutralisation des termes du prompt modèle."""
        prompt = build_prompt(AssetType.MODEL, "Sexy pose, very SENSUAL look")
        assert "sexy" not in prompt.lower()
        assert "sensual" not in prompt.lower()
        assert "elegante pose" in prompt

    def test_look_combine_mode(self):
        """Test le prompt look en mode combinaison d'images."""
        prompt = build_prompt(AssetType.LOOK, "summer look", look_mode=LookMode.COMBINE_IMAGES)
        assert "Use the EXACT model shown in the first image" in prompt
        assert "SPECIFIC REQUIREMENTS: summer look" in prompt

    def test_look_text_only_mode(self):
        """Test le prompt look en mode texte."""
        prompt = build_prompt(AssetType.LOOK, "summer look", look_mode=LookMode.TEXT_ONLY)
        assert "TEXT-BASED GENERATION" in prompt
        assert "first image" not in prompt


@pytest.mark.unit
class TestDescriptions:
    """Tests pour les descriptions structurées."""

    def test_garment_description_with_size_list(self):
        """Test la description d'un vêtement avec une liste de tailles."""
        description = build_garment_description("Vestido flores", "vestido", "Vestido de verano", "rosa", ["S", "M"])
        assert description == (
            "VESTIDO: Vestido flores | Color principal: rosa | Tallas disponibles: S, M | Descripción: Vestido de verano"
        )

    def test_garment_description_with_single_size(self):
        """Test la description d'un vêtement avec une seule taille."""
        description = build_garment_description("Falda", "falda", "Falda plisada", sizes="M")
        assert description == "FALDA: Falda | Talla: M | Descripción: Falda plisada"

    def test_model_description(self):
        """Test la description structurée d'un modèle."""
        description = build_model_description("Lucía", "femenino", "sonriente", age="8 años", hair_color="Rubio")
        assert description == "MODEL: Lucía - Gender: femenino | Age: 8 años | Hair color: Rubio | Additional features: sonriente"

    def test_sanitize_keeps_other_words(self):
        """Test que la neutralisation garde les autres mots."""
        assert sanitize_model_description("provocative smile") == "sofisticado smile"

    def test_validate_model_description_flags_terms(self):
        """Test le signalement des termes risqués."""
        check = validate_model_description("nude model")
        assert not check.is_valid
        assert any('"nude"' in issue for issue in check.issues)
        assert "Specify the model's gender" in check.suggestions

    def test_validate_model_description_complete(self):
        """Test une description de modèle complète."""
        check = validate_model_description("Niño de 6 años, género masculino")
        assert check.is_valid
        assert check.suggestions == []


@pytest.mark.unit
class TestLookContext:
    """Tests pour le contexte des looks."""

    def test_text_only(self):
        """Test le contexte du mode texte."""
        assert look_context(LookMode.TEXT_ONLY).startswith("TEXT-ONLY MODE")

    def test_combine_with_styling_context(self):
        """Test le contexte de combinaison avec stylisme."""
        context = look_context(LookMode.COMBINE_IMAGES, {"garments": []})
        assert context.startswith("VISUAL COMBINATION MODE:")
        assert "FIRST IMAGE: Model to be dressed" in context

    def test_combine_without_styling_context(self):
        """Test le contexte de combinaison sans stylisme."""
        assert look_context(LookMode.COMBINE_IMAGES) == "VISUAL COMBINATION: Combine model and garment images"

    def test_text_only_look_description_lists_garments(self):
        """Test que la description texte liste les vêtements."""
        description = text_only_look_description(
            "Look de verano",
            {
                "lookDescription": "fresco y colorido",
                "garments": [
                    {"name": "Camiseta", "category": "camiseta", "color": "azul"},
                    {"name": "Short"},
                ],
            },
        )
        assert description.splitlines() == [
            "Look de verano",
            "Look: fresco y colorido",
            "Garments to wear:",
            "- camiseta: Camiseta (azul)",
            "- garment: Short",
        ]


@pytest.mark.unit
class TestEditAndCatalogPrompts:
    """Tests pour l'édition et les prompts catalogue."""

    def test_edit_prompt(self):
        """Test le prompt d'édition."""
        prompt = build_edit_prompt("  change the color to blue  ", "model")
        assert prompt.startswith("GENERATE IMAGE: Edit the fashion model")
        assert "EDIT INSTRUCTIONS: change the color to blue" in prompt
        assert prompt.endswith("GENERATE EDITED IMAGE NOW - OUTPUT IMAGE ONLY, NO TEXT.")

    @pytest.mark.parametrize(
        "prompt,expected",
        [
            ("make the shirt red", True),
            ("short", False),
            ("", False),
            (None, False),
            ("make the model naked please", False),
        ],
    )
    def test_validate_edit_prompt(self, prompt, expected):
        """Test la validation des instructions d'édition."""
        assert validate_edit_prompt(prompt) is expected

    def test_catalog_prompt_with_annotations(self):
        """Test le prompt catalogue avec annotations."""
        prompt = build_catalog_prompt(AssetType.GARMENT, "only the jacket")
        assert "SPECIFIC INSTRUCTIONS: only the jacket" in prompt
        assert "{instructions}" not in prompt

    def test_catalog_prompt_without_annotations(self):
        """Test le prompt catalogue sans annotations."""
        prompt = build_catalog_prompt("model")
        assert "SPECIFIC INSTRUCTIONS" not in prompt
        assert "render a CHILD version" in prompt

    def test_catalog_prompt_rejects_look(self):
        """Test qu'un look n'a pas de prompt catalogue."""
        with pytest.raises(ValueError):
            build_catalog_prompt(AssetType.LOOK)


@pytest.mark.unit
def test_video_prompts():
    """Test les prompts vidéo."""
    looks = [("Look 1", "verano"), ("Look 2", "invierno")]

    prompt = build_video_prompt("Colección otoño", looks, duration_seconds=8)
    assert "Video description: Colección otoño" in prompt
    assert "- Look 1: verano\n- Look 2: invierno" in prompt
    assert "Duration: 8 seconds" in prompt

    fallback = build_video_fallback_prompt("Colección otoño", looks, ['Look "Look 1": niña sonriente'])
    assert "DETAILED LOOK DESCRIPTIONS (from image analysis):" in fallback
    assert 'Look "Look 1": niña sonriente' in fallback
