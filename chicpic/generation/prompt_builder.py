"""Constructeur de prompts pour la génération d'images de mode enfantine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class AssetType(str, Enum):
    """Types d'images générées par le système."""

    GARMENT = "garment"
    MODEL = "model"
    LOOK = "look"


class LookMode(str, Enum):
    """Mode de composition d'un look."""

    # Images de référence fournies : modèle d'abord, puis les vêtements
    COMBINE_IMAGES = "combine_images"
    # Aucune image : génération à partir du texte seul
    TEXT_ONLY = "text_only"


FINAL_INSTRUCTION = "GENERATE IMAGE NOW - NO TEXT DESCRIPTION."

CATALOG_LINE = (
    'Important: This image will be used in a professional fashion catalog called "Chic Pic".\n'
    "Quality must be exceptional and commercially viable."
)

GARMENT_TEMPLATE = """CREATE IMAGE: Professional children's fashion catalog photography showing a child's garment from front and back view in the same frame.

- High definition studio photography (1024x1024)
- Pure white seamless background
- Professional softbox lighting on both views
- Commercial catalog quality dual composition for children's clothing
- Front and back view of the child's garment side by side
- No human model, garment only
- Children's clothing size and proportions
- Sharp details and vibrant, child-friendly colors
- Clean, wrinkle-free presentation
- Child-appropriate design and styling"""

LOOK_TEMPLATE = """CREATE IMAGE: Professional fashion photography showing a child model wearing the described outfit.

{mode_instructions}

TECHNICAL REQUIREMENTS:
- High definition studio photography (1024x1024)
- Pure white seamless background
- Professional studio lighting
- Commercial fashion photography quality for children's clothing
- Child-appropriate poses and expressions"""

LOOK_MODE_INSTRUCTIONS = {
    LookMode.COMBINE_IMAGES: """VISUAL COMPOSITION INSTRUCTIONS:
- Use the EXACT model shown in the first image (same child)
- Take each garment from its individual product image
- Place/fit each garment onto the model's body
- Maintain the model's original appearance
- Keep the garments' original colors, textures, and design details
- Ensure realistic fit and draping on the model's body""",
    LookMode.TEXT_ONLY: """TEXT-BASED GENERATION:
- Create a professional child model wearing the described clothing
- Use the exact garment descriptions provided
- Maintain child-appropriate styling and poses
- Professional commercial catalog quality""",
}

# Échelle de prompts pour les modèles : de plus en plus sobres
MODEL_PROMPT_LADDER = {
    "primary": """CREATE IMAGE: Professional full body fashion model for premium catalog photography.

- Ultra high definition studio photography (1024x1024)
- Pure white seamless background
- Professional studio lighting setup
- Full body shot from head to feet
- Natural confident modeling pose
- Professional makeup and styling
- Minimal neutral clothing
- Commercial catalog quality
- Sharp focus entire figure
- Fashion industry standard

GENERATE FULL BODY FASHION MODEL IMAGE NOW - NO TEXT DESCRIPTION.""",
    "alternative": """CREATE IMAGE: Full body fashion model for high-end catalog.

- Studio photography white background
- Professional model natural makeup
- Full body head to feet visible
- Fashion catalog quality
- Clean commercial aesthetic

GENERATE FULL BODY MODEL IMAGE NOW - NO TEXT.""",
    "simple": """CREATE IMAGE: Full body fashion model photo.
White background, professional lighting, catalog quality.
GENERATE IMAGE NOW - NO TEXT.""",
}

EDIT_TEMPLATES = {
    AssetType.GARMENT: """GENERATE IMAGE: Edit the fashion garment in the provided image based on user instructions.
- Professional catalog photography style
- White seamless background
- High quality studio lighting
- Focus on the garment modifications requested
- Maintain garment structure and realism""",
    AssetType.MODEL: """GENERATE IMAGE: Edit the fashion model in the provided image based on user instructions.
- Professional studio photography style
- White seamless background
- Full body composition maintained
- Natural and professional appearance
- Apply changes while keeping model realistic""",
    AssetType.LOOK: """GENERATE IMAGE: Edit the styled fashion look in the provided image based on user instructions.
- Professional fashion photography style
- White seamless background
- Maintain model-garment fit and proportion
- Apply styling changes as requested
- Keep overall composition coherent""",
}

EDIT_REQUIREMENTS = """TECHNICAL REQUIREMENTS:
- Output: High definition image (1024x1024)
- Quality: Professional catalog/studio standard
- Changes: Apply ONLY what is requested
- Style: Maintain original lighting and composition
- Result: Realistic and coherent modifications

GENERATE EDITED IMAGE NOW - OUTPUT IMAGE ONLY, NO TEXT."""

CATALOG_TEMPLATES = {
    AssetType.GARMENT: """CREATE IMAGE: Professional children's fashion catalog photography showing a garment from front and back view in the same frame.

{instructions}REQUIREMENTS:
- Extract ONLY the specific garment mentioned in instructions (if provided) or the main garment visible
- High definition studio photography (1024x1024)
- Pure white seamless background
- Front and back view of the child's garment side by side
- No human model, garment only
- Sharp details and vibrant, child-friendly colors
- Clean, wrinkle-free presentation

GENERATE CHILDREN'S FASHION GARMENT IMAGE NOW - NO TEXT DESCRIPTION.""",
    AssetType.MODEL: """CREATE IMAGE: Professional full body child fashion model for clothing design.

{instructions}TRANSFORMATION REQUIREMENTS:
- If the image shows an ADULT person, render a CHILD version (age 5-12 years) with child proportions
- If the image already shows a child, keep them as a child but improve the quality
- Maintain the same gender, hair color, eye color, and skin tone from the original
- Preserve the pose and expression but make it child-appropriate

REQUIREMENTS:
- Extract ONLY the model from the image
- Ultra high definition studio photography (1024x1024)
- Pure white seamless background
- Full body shot from head to feet
- Model in neutral base clothing ready for virtual clothing styling
- Commercial catalog quality for children's fashion

GENERATE PROFESSIONAL CHILDREN'S FASHION MODEL NOW - NO TEXT DESCRIPTION.""",
}

GARMENT_CATEGORY_PREFIXES = (
    "CAMISETA:",
    "CAMISA:",
    "CHAQUETA:",
    "PANTALON:",
    "FALDA:",
    "VESTIDO:",
    "ZAPATOS:",
    "ACCESORIOS:",
)

MODEL_DESCRIPTION_LABELS = (
    "MODEL:",
    "Gender:",
    "Age:",
    "Height:",
    "Body type:",
    "Hair color:",
    "Eye color:",
    "Skin tone:",
)

# Termes qui déclenchent souvent des blocages sur les images de personnes
MODEL_TERM_REPLACEMENTS = {
    "sexy": "elegante",
    "provocative": "sofisticado",
    "sensual": "atractivo",
    "revealing": "moderno",
    "seductive": "carismático",
}

PROBLEMATIC_MODEL_TERMS = (
    "sexy",
    "provocative",
    "sensual",
    "nude",
    "naked",
    "revealing",
    "intimate",
    "seductive",
)

INAPPROPRIATE_EDIT_TERMS = ("nude", "naked", "sexual", "inappropriate")

MIN_EDIT_PROMPT_LENGTH = 10

_GENDER_HINT = re.compile(r"género|gender|masculino|femenino|male|female", re.IGNORECASE)
_AGE_HINT = re.compile(r"edad|age|\d+\s*(años|years|año)", re.IGNORECASE)


@dataclass
class ModelDescriptionCheck:
    """Résultat de la vérification d'une description de modèle."""

    is_valid: bool
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def _assemble(*sections: Optional[str]) -> str:
    return "\n\n".join(section.strip() for section in sections if section and section.strip())


def _model_ladder_key(attempt_number: int) -> str:
    if attempt_number == 1:
        return "primary"
    if attempt_number == 2:
        return "alternative"
    return "simple"


def build_prompt(
    asset_type: AssetType | str,
    description: str,
    attempt_number: int = 1,
    additional_context: Optional[str] = None,
    look_mode: LookMode = LookMode.COMBINE_IMAGES,
) -> str:
    """
    Construit le prompt complet pour un type d'image.

    Args:
        asset_type: garment, model ou look
        description: Description libre ou structurée (séparée par "|")
        attempt_number: Numéro de tentative (1-based), utilisé par l'échelle des modèles
        additional_context: Contexte supplémentaire ajouté en fin de prompt
        look_mode: Combinaison d'images fournies ou génération texte seul (looks)

    Returns:
        Prompt prêt à être envoyé au modèle

    Raises:
        ValueError: Si attempt_number < 1 ou asset_type inconnu
    """
    if attempt_number < 1:
        raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")

    asset_type = AssetType(asset_type)

    if asset_type is AssetType.MODEL:
        return build_model_prompt(description, attempt_number, additional_context)

    if asset_type is AssetType.GARMENT:
        base = GARMENT_TEMPLATE
        requirements = enhance_garment_description(description)
    else:
        base = LOOK_TEMPLATE.format(mode_instructions=LOOK_MODE_INSTRUCTIONS[LookMode(look_mode)])
        requirements = description.strip()

    return _assemble(
        base,
        f"SPECIFIC REQUIREMENTS: {requirements}",
        f"ADDITIONAL CONTEXT: {additional_context}" if additional_context else None,
        FINAL_INSTRUCTION,
    )


def build_model_prompt(
    description: str,
    attempt_number: int = 1,
    additional_context: Optional[str] = None,
) -> str:
    """Prompt de modèle selon l'échelle primary -> alternative -> simple."""
    base = MODEL_PROMPT_LADDER[_model_ladder_key(attempt_number)]
    model_description = enhance_model_description(sanitize_model_description(description))

    return _assemble(
        base,
        f"Model description: {model_description}",
        f"ADDITIONAL CONTEXT: {additional_context}" if additional_context else None,
        CATALOG_LINE,
        "Generate the fashion model photo now.",
    )


def enhance_garment_description(description: str) -> str:
    """Traduit une description structurée de vêtement en exigences explicites."""
    parts = [part.strip() for part in description.split("|")]

    if len(parts) <= 1:
        return f"Children's clothing item. {description.strip()}"

    enhanced = ["Children's clothing item."]
    for part in parts:
        if "Color principal:" in part:
            enhanced.append(f"Primary color: {part.replace('Color principal:', '').strip()}.")
        elif "Tallas disponibles:" in part:
            sizes = part.replace("Tallas disponibles:", "").strip()
            enhanced.append(f"Available sizes for children: {sizes}.")
        elif any(prefix in part for prefix in GARMENT_CATEGORY_PREFIXES):
            enhanced.append(f"Children's {part}.")
        elif "Descripción:" in part:
            details = part.replace("Descripción:", "").strip()
            enhanced.append(f"Details for children's clothing: {details}.")
    return " ".join(enhanced)


def enhance_model_description(description: str) -> str:
    """Conserve les champs reconnus d'une description de modèle structurée."""
    parts = [part.strip() for part in description.split("|")]

    if len(parts) <= 1:
        return description.strip()

    enhanced = []
    for part in parts:
        if any(label in part for label in MODEL_DESCRIPTION_LABELS):
            enhanced.append(f"{part}.")
        elif "Additional features:" in part:
            features = part.replace("Additional features:", "").strip()
            enhanced.append(f"Special characteristics: {features}.")
    return " ".join(enhanced)


def sanitize_model_description(description: str) -> str:
    """Remplace les termes problématiques par des alternatives commerciales."""
    cleaned = description
    for term, replacement in MODEL_TERM_REPLACEMENTS.items():
        cleaned = re.sub(term, replacement, cleaned, flags=re.IGNORECASE)
    return cleaned


def validate_model_description(description: str) -> ModelDescriptionCheck:
    """Signale les termes risqués et les informations manquantes (genre, âge)."""
    check = ModelDescriptionCheck(is_valid=True)
    lowered = description.lower()

    for term in PROBLEMATIC_MODEL_TERMS:
        if term in lowered:
            check.issues.append(f'The word "{term}" may trigger safety restrictions')
            check.suggestions.append('Prefer commercial terms such as "elegant", "professional", "sophisticated"')

    if not _GENDER_HINT.search(description):
        check.suggestions.append("Specify the model's gender")
    if not _AGE_HINT.search(description):
        check.suggestions.append("Specify the model's approximate age")

    check.is_valid = not check.issues
    return check


def look_context(
    look_mode: LookMode,
    styling_context: Optional[Mapping[str, Any]] = None,
) -> str:
    """Contexte additionnel d'un look selon le mode de composition."""
    if look_mode is LookMode.TEXT_ONLY:
        return (
            "TEXT-ONLY MODE: No reference images are provided. "
            "Create an original child model wearing exactly the garments described above."
        )

    if styling_context:
        return (
            "VISUAL COMBINATION MODE:\n"
            "- FIRST IMAGE: Model to be dressed (use this exact model)\n"
            "- SUBSEQUENT IMAGES: Individual garments to place on the model\n"
            "- TASK: Visually combine - take model from first image, take garments from other images, dress the model\n"
            "- PRESERVE: Model's appearance and garment details exactly as shown\n"
            "- RESULT: Single image showing the model wearing all the provided garments"
        )
    return "VISUAL COMBINATION: Combine model and garment images"


def text_only_look_description(
    description: str,
    styling_context: Optional[Mapping[str, Any]] = None,
) -> str:
    """Description d'un look sans images : les vêtements sont décrits en texte."""
    garments: Sequence[Mapping[str, Any]] = (styling_context or {}).get("garments") or []
    lines = []
    for garment in garments:
        line = f"- {garment.get('category', 'garment')}: {garment.get('name', 'unnamed')}"
        if garment.get("color"):
            line += f" ({garment['color']})"
        lines.append(line)

    look_description = (styling_context or {}).get("look_description") or (styling_context or {}).get(
        "lookDescription"
    )
    sections = [description.strip()]
    if look_description:
        sections.append(f"Look: {look_description}")
    if lines:
        sections.append("Garments to wear:\n" + "\n".join(lines))
    return "\n".join(sections)


def build_styling_instructions() -> str:
    """Instructions de combinaison visuelle envoyées comme description d'un look."""
    return (
        "Visual combination: Take the model from the model image and dress them with the garments "
        "from the garment images. Use the exact model and exact garments as shown in their respective "
        "images. Professional catalog image with white background."
    )


def build_garment_description(
    name: str,
    category: str,
    description: str,
    color: Optional[str] = None,
    sizes: Optional[Sequence[str] | str] = None,
) -> str:
    """Description structurée d'un vêtement (format "CATEGORIE: nom | ...")."""
    parts = [f"{category.upper()}: {name}"]
    if color and color.strip():
        parts.append(f"Color principal: {color}")
    if isinstance(sizes, str):
        if sizes.strip():
            parts.append(f"Talla: {sizes}")
    elif sizes:
        parts.append(f"Tallas disponibles: {', '.join(sizes)}")
    parts.append(f"Descripción: {description}")
    return " | ".join(parts)


def build_model_description(
    name: str,
    gender: str,
    characteristics: str,
    age: Optional[str] = None,
    height: Optional[str] = None,
    body_type: Optional[str] = None,
    hair_color: Optional[str] = None,
    eye_color: Optional[str] = None,
    skin_tone: Optional[str] = None,
) -> str:
    """Description structurée d'un modèle (format "MODEL: nom - Gender: ... | ...")."""
    parts = [f"MODEL: {name} - Gender: {gender}"]
    for label, value in (
        ("Age", age),
        ("Height", height),
        ("Body type", body_type),
        ("Hair color", hair_color),
        ("Eye color", eye_color),
        ("Skin tone", skin_tone),
    ):
        if value:
            parts.append(f"{label}: {value}")
    parts.append(f"Additional features: {characteristics}")
    return " | ".join(parts)


def build_edit_prompt(edit_prompt: str, item_type: AssetType | str) -> str:
    """Prompt d'édition d'une image existante."""
    return _assemble(
        EDIT_TEMPLATES[AssetType(item_type)],
        f"EDIT INSTRUCTIONS: {edit_prompt.strip()}",
        EDIT_REQUIREMENTS,
    )


def validate_edit_prompt(prompt: Optional[str]) -> bool:
    """Refuse les instructions trop courtes ou inappropriées."""
    if not prompt or len(prompt.strip()) < MIN_EDIT_PROMPT_LENGTH:
        return False
    lowered = prompt.lower()
    return not any(term in lowered for term in INAPPROPRIATE_EDIT_TERMS)


def build_catalog_prompt(kind: AssetType | str, annotations: Optional[str] = None) -> str:
    """Prompt de transformation d'une photo utilisateur en image catalogue."""
    kind = AssetType(kind)
    if kind not in CATALOG_TEMPLATES:
        raise ValueError(f"No catalog template for {kind.value}")
    instructions = f"SPECIFIC INSTRUCTIONS: {annotations.strip()}\n\n" if annotations and annotations.strip() else ""
    return CATALOG_TEMPLATES[kind].format(instructions=instructions)


def build_video_prompt(description: str, looks: Sequence[tuple[str, str]], duration_seconds: int = 8) -> str:
    """Prompt de vidéo promotionnelle à partir des looks sélectionnés."""
    looks_block = "\n".join(f"- {name}: {look_description}" for name, look_description in looks)
    return _assemble(
        "Create a professional promotional children's fashion video for cicibet.",
        f"Video description: {description.strip()}",
        f"Looks to feature:\n{looks_block}",
        "The video must:\n"
        "- Show the children's fashion looks in an attractive, professional way\n"
        "- Use smooth transitions between the looks\n"
        "- Use vibrant, cheerful colors suited to children\n"
        "- Keep a professional catalog style\n"
        f"- Duration: {duration_seconds} seconds\n"
        "- Resolution: high quality, horizontal format (16:9)",
    )


def build_video_fallback_prompt(
    description: str,
    looks: Sequence[tuple[str, str]],
    image_descriptions: Sequence[str],
    duration_seconds: int = 8,
) -> str:
    """Prompt vidéo sans images de référence, guidé par la description des looks."""
    looks_block = "\n".join(f"- {name}: {look_description}" for name, look_description in looks)
    return _assemble(
        "Create a professional promotional children's fashion video for cicibet.",
        f"Video description: {description.strip()}",
        "DETAILED LOOK DESCRIPTIONS (from image analysis):\n" + "\n\n".join(image_descriptions),
        f"ADDITIONAL LOOK INFORMATION:\n{looks_block}",
        "The video must show:\n"
        "- Diverse, cheerful child models matching the described looks\n"
        "- The colors, styles and garment details from the descriptions\n"
        "- Smooth transitions between outfits\n"
        "- Natural, gentle movement\n"
        f"- Duration: {duration_seconds} seconds, horizontal format (16:9)",
        "IMPORTANT: Use the detailed descriptions as the main guide. "
        "The images do not need to be replicated exactly, only their essence and visual characteristics.",
    )
