"""Analyse d'images par le modèle texte (métadonnées de catalogue, descriptions de looks)."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

from loguru import logger

from chicpic.generation.exceptions import GenerationError


_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

GARMENT_CATEGORIES = ("camiseta", "pantalon", "vestido", "falda", "camisa", "chaqueta", "zapatos", "accesorios")

DEFAULT_LOOK_DESCRIPTION = "Imagen de look de moda infantil"


@dataclass
class GarmentAnalysis:
    """Métadonnées d'un vêtement déduites de la photo."""

    name: str = "Prenda procesada"
    description: str = "Prenda procesada con IA"
    category: str = "camiseta"
    color: str = "No especificado"
    available_sizes: list[str] = field(default_factory=lambda: ["S", "M", "L"])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ModelAnalysis:
    """Métadonnées d'un modèle déduites de la photo."""

    name: str = "Modelo procesado"
    characteristics: str = "Modelo procesado con IA"
    gender: str = "unisex"
    age: str = "Niño/Niña"
    height: str = "Promedio"
    body_type: str = "Promedio"
    hair_color: str = "Castaño"
    eye_color: str = "Café"
    skin_tone: str = "Medio"
    upper_body_size: str = "M"
    lower_body_size: str = "M"
    shoe_size: str = "28"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


GARMENT_ANALYSIS_PROMPT = """Analyze this image of a children's clothing item and produce a complete, professional description.

{instructions}IMPORTANT: This is a children's fashion image. Analyze the garment named in the instructions (if any) or the main visible garment.

Return a JSON object with this structure:
{{
  "name": "Descriptive garment name in Spanish (e.g. Camiseta blanca básica, Vestido rosa con flores)",
  "description": "Detailed description: material, style, design, decorative details, occasion",
  "category": "One of: camiseta, pantalon, vestido, falda, camisa, chaqueta, zapatos, accesorios",
  "color": "Main color or colors separated by commas",
  "availableSizes": ["Suggested sizes: XS, S, M, L, XL for clothing or 20 to 40 (even numbers) for shoes"]
}}

Answer ONLY with valid JSON, no additional text."""

MODEL_ANALYSIS_PROMPT = """Analyze this image of a person (adult or child) for children's fashion and produce a complete, professional description.

{instructions}IMPORTANT:
- If the image shows an ADULT, keep their physical traits (gender, hair color, eye color, skin tone) but describe a CHILD version (5-12 years)
- If the image already shows a child, describe them as they are
- Keep the analysis appropriate and commercial

Return a JSON object with this structure:
{{
  "name": "Descriptive model name",
  "characteristics": "Detailed characteristics: style, expression, natural pose",
  "gender": "masculino, femenino or unisex (same as the original)",
  "age": "One of: Bebé (0-2 años), Toddler (2-4 años), Niño pequeño (5-8 años), Niño (9-12 años), Adolescente (13-17 años)",
  "height": "One of: Muy pequeño (< 1.00m), Pequeño (1.00-1.20m), Promedio (1.21-1.40m), Alto (1.41-1.60m), Muy alto (> 1.60m)",
  "bodyType": "One of: Delgado, Promedio, Robusto, Bebé, Toddler",
  "hairColor": "One of: Negro, Castaño oscuro, Castaño, Rubio oscuro, Rubio claro, Pelirrojo, Gris, Blanco",
  "eyeColor": "One of: Café, Azul, Verde, Avellana, Gris, Negro",
  "skinTone": "One of: Muy claro, Claro, Medio claro, Medio, Moreno claro, Oscuro, Muy oscuro",
  "upperBodySize": "One of: XS, S, M, L, XL, XXL",
  "lowerBodySize": "One of: XS, S, M, L, XL, XXL",
  "shoeSize": "One of: 20, 22, 24, 26, 28, 30, 32, 34, 36, 38, 40"
}}

Answer ONLY with valid JSON, no additional text."""

LOOK_DESCRIPTION_PROMPT = """Analyze this children's fashion look image and write a detailed, professional description that can be used to generate a promotional video.

Describe:
1. The model (boy/girl, general traits such as hair color and expression, without an exact age)
2. The garments worn (type, colors, styles, details)
3. Colors and patterns
4. The overall style and mood (cheerful, elegant, casual...)
5. Composition and setting (background, lighting, pose)

Answer ONLY with the detailed description, no additional text."""


def _instructions(annotations: Optional[str]) -> str:
    if annotations and annotations.strip():
        return f"SPECIAL INSTRUCTIONS: {annotations.strip()}\n\n"
    return ""


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """Extrait le premier objet JSON d'une réponse texte, ou None."""
    match = _JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)([A-Z])", r"_\1", name).lower()


def _merge(defaults: Any, data: dict[str, Any]) -> Any:
    """Applique les champs reconnus (camelCase ou snake_case) sur les valeurs par défaut."""
    known = {f.name for f in fields(defaults)}
    for key, value in data.items():
        name = _camel_to_snake(key)
        if name in known and value not in (None, "", []):
            setattr(defaults, name, value)
    return defaults


async def analyze_garment_image(client: Any, image: Any, annotations: Optional[str] = None) -> Optional[GarmentAnalysis]:
    """
    Déduit nom, description, catégorie, couleur et tailles d'une photo de vêtement.

    Returns:
        GarmentAnalysis, ou None si l'analyse échoue ou n'est pas exploitable
    """
    prompt = GARMENT_ANALYSIS_PROMPT.format(instructions=_instructions(annotations))
    try:
        text = await client.generate_text(prompt, (image,))
    except GenerationError as e:
        logger.warning("Garment analysis failed", error=str(e))
        return None

    data = extract_json_object(text)
    if data is None:
        logger.warning("Garment analysis returned no JSON", response=(text or "")[:200])
        return None

    analysis = _merge(GarmentAnalysis(), data)
    if isinstance(analysis.available_sizes, str):
        analysis.available_sizes = [s.strip() for s in analysis.available_sizes.split(",") if s.strip()]
    else:
        analysis.available_sizes = [str(size) for size in analysis.available_sizes]
    if str(analysis.category).lower() not in GARMENT_CATEGORIES:
        logger.debug("Unknown garment category from analysis", category=analysis.category)
    return analysis


async def analyze_model_image(client: Any, image: Any, annotations: Optional[str] = None) -> Optional[ModelAnalysis]:
    """Déduit les caractéristiques et tailles d'un modèle à partir d'une photo."""
    prompt = MODEL_ANALYSIS_PROMPT.format(instructions=_instructions(annotations))
    try:
        text = await client.generate_text(prompt, (image,))
    except GenerationError as e:
        logger.warning("Model analysis failed", error=str(e))
        return None

    data = extract_json_object(text)
    if data is None:
        logger.warning("Model analysis returned no JSON", response=(text or "")[:200])
        return None

    analysis = _merge(ModelAnalysis(), data)
    analysis.shoe_size = str(analysis.shoe_size)
    return analysis


async def describe_look_image(client: Any, image: Any) -> str:
    """Description détaillée d'une image de look, utilisée pour les vidéos."""
    try:
        text = await client.generate_text(LOOK_DESCRIPTION_PROMPT, (image,))
    except GenerationError as e:
        logger.warning("Look image description failed", error=str(e))
        return DEFAULT_LOOK_DESCRIPTION
    return text.strip() or DEFAULT_LOOK_DESCRIPTION
