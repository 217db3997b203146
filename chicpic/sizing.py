"""Tailles et ajustement des vêtements sur un modèle."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional


class FitType(str, Enum):
    """Ajustement d'un vêtement sur le modèle."""

    MUY_AJUSTADO = "muy_ajustado"
    AJUSTADO = "ajustado"
    PERFECTO = "perfecto"
    SUELTO = "suelto"
    MUY_SUELTO = "muy_suelto"


CLOTHING_SIZE_ORDER = {"XS": 1, "S": 2, "M": 3, "L": 4, "XL": 5, "XXL": 6}

SHOE_SIZES = [str(size) for size in range(35, 47)]
ONE_SIZE = "Talla Única"

UPPER_BODY_CATEGORIES = ("camiseta", "camisa", "chaqueta", "vestido")
LOWER_BODY_CATEGORIES = ("pantalon", "falda")

FIT_SHORT_DESCRIPTIONS = {
    FitType.MUY_AJUSTADO: "Muy Ajustado",
    FitType.AJUSTADO: "Ajustado",
    FitType.PERFECTO: "Perfecto",
    FitType.SUELTO: "Suelto",
    FitType.MUY_SUELTO: "Muy Suelto",
}

_FIT_DESCRIPTIONS = {
    FitType.MUY_AJUSTADO: {
        "camiseta": "La {name} queda muy ajustada, abrazando la figura y posiblemente limitando el movimiento.",
        "camisa": "La {name} queda muy ceñida al cuerpo, con mangas y torso muy ajustados.",
        "chaqueta": "La {name} queda muy ajustada, dificultando el cierre y limitando la comodidad.",
        "pantalon": "El {name} queda muy ajustado en cintura y piernas, marcando significativamente la silueta.",
        "falda": "La {name} queda muy ceñida en caderas y cintura, limitando el movimiento.",
        "vestido": "El {name} queda muy ajustado en todas las áreas, delineando completamente la figura.",
        "zapatos": "Los {name} están muy pequeños, causando incomodidad y posible dolor.",
        "default": "{name} queda muy ajustado.",
    },
    FitType.AJUSTADO: {
        "camiseta": "La {name} queda ceñida pero cómoda, siguiendo las líneas del cuerpo sin apretar.",
        "camisa": "La {name} queda bien entallada, con un corte favorecedor y elegante.",
        "chaqueta": "La {name} queda ceñida pero permite movimiento cómodo, con un corte entallado.",
        "pantalon": "El {name} queda ceñido en cintura y piernas, con un corte favorecedor.",
        "falda": "La {name} queda ceñida en las caderas, creando una silueta elegante.",
        "vestido": "El {name} queda ceñido, resaltando la figura de manera favorecedora.",
        "zapatos": "Los {name} quedan un poco ajustados pero cómodos de usar.",
        "default": "{name} queda ceñido pero cómodo.",
    },
    FitType.PERFECTO: {
        "camiseta": "La {name} queda perfecta, con el ajuste ideal para comodidad y estilo.",
        "camisa": "La {name} tiene el ajuste perfecto, ni muy holgada ni muy ajustada.",
        "chaqueta": "La {name} queda perfecta, permitiendo libertad de movimiento y un aspecto impecable.",
        "pantalon": "El {name} tiene el ajuste perfecto en cintura, caderas y largo.",
        "falda": "La {name} queda perfecta, con el ajuste ideal en caderas y cintura.",
        "vestido": "El {name} queda perfecto, con el ajuste ideal en todas las áreas.",
        "zapatos": "Los {name} quedan perfectos, brindando total comodidad.",
        "default": "{name} queda perfecto.",
    },
    FitType.SUELTO: {
        "camiseta": "La {name} queda holgada pero elegante, brindando comodidad y un aspecto relajado.",
        "camisa": "La {name} queda holgada, creando un estilo cómodo y casual.",
        "chaqueta": "La {name} queda holgada, permitiendo capas debajo y un look oversized.",
        "pantalon": "El {name} queda holgado, brindando comodidad y un estilo relajado.",
        "falda": "La {name} queda holgada en las caderas, creando un aspecto fluido y cómodo.",
        "vestido": "El {name} queda holgado, brindando comodidad y un estilo elegante.",
        "zapatos": "Los {name} están un poco grandes pero aún se pueden usar con calcetines.",
        "default": "{name} queda holgado pero cómodo.",
    },
    FitType.MUY_SUELTO: {
        "camiseta": "La {name} queda muy holgada, creando un aspecto oversized muy pronunciado.",
        "camisa": "La {name} queda muy holgada, con un estilo oversized muy marcado.",
        "chaqueta": "La {name} queda muy holgada, con un estilo oversized que puede verse desproporcionado.",
        "pantalon": "El {name} queda muy holgado, posiblemente necesitando un cinturón para mantenerse en su lugar.",
        "falda": "La {name} queda muy holgada, creando un volumen considerable.",
        "vestido": "El {name} queda muy holgado, con un aspecto oversized muy pronunciado.",
        "zapatos": "Los {name} están muy grandes, dificultando caminar cómodamente.",
        "default": "{name} queda muy holgado.",
    },
}


def _size_rank(size: str, category: str) -> int:
    if category == "zapatos":
        try:
            return int(str(size).strip())
        except ValueError:
            raise ValueError(f"Invalid shoe size: {size!r}") from None
    rank = CLOTHING_SIZE_ORDER.get(str(size).strip().upper())
    if rank is None:
        raise ValueError(f"Invalid clothing size: {size!r}")
    return rank


def determine_fit_type(garment_size: str, model_size: str, category: str) -> FitType:
    """
    Ajustement selon l'écart entre la taille du vêtement et celle du modèle.

    Écart <= -2 : muy_ajustado, -1 : ajustado, 0 : perfecto, 1 : suelto, >= 2 : muy_suelto.
    Les accessoires sont toujours parfaits ; les chaussures comparent des pointures.
    """
    if category == "accesorios":
        return FitType.PERFECTO

    diff = _size_rank(garment_size, category) - _size_rank(model_size, category)
    if diff <= -2:
        return FitType.MUY_AJUSTADO
    if diff == -1:
        return FitType.AJUSTADO
    if diff == 0:
        return FitType.PERFECTO
    if diff == 1:
        return FitType.SUELTO
    return FitType.MUY_SUELTO


def generate_fit_description(fit_type: FitType, garment_name: str, category: str) -> str:
    if category == "accesorios":
        return f"El {garment_name} queda perfecto."
    templates = _FIT_DESCRIPTIONS[FitType(fit_type)]
    return templates.get(category, templates["default"]).format(name=garment_name)


def get_fit_short_description(fit_type: FitType) -> str:
    return FIT_SHORT_DESCRIPTIONS[FitType(fit_type)]


def get_model_size_for_category(upper_body_size: str, lower_body_size: str, shoe_size: str, category: str) -> str:
    """Taille du modèle à comparer pour une catégorie (haut, bas ou pointure)."""
    if category in LOWER_BODY_CATEGORIES:
        return lower_body_size
    if category == "zapatos":
        return shoe_size
    # Haut du corps, robes et accessoires
    return upper_body_size


def is_valid_size_for_category(size: str, category: str) -> bool:
    if category == "zapatos":
        try:
            return 35 <= int(size) <= 46
        except (TypeError, ValueError):
            return False
    if category == "accesorios":
        return True
    return size in CLOTHING_SIZE_ORDER


def get_available_sizes_for_category(category: str) -> list[str]:
    if category == "zapatos":
        return list(SHOE_SIZES)
    if category == "accesorios":
        return [ONE_SIZE]
    return list(CLOTHING_SIZE_ORDER)


def compute_garment_fits(
    model: Any,
    garments: Iterable[Any],
    selected_sizes: Optional[Mapping[str, str]] = None,
) -> list[dict[str, Any]]:
    """
    Calcule l'ajustement de chaque vêtement d'un look sur le modèle.

    Args:
        model: Objet avec upper_body_size, lower_body_size et shoe_size
        garments: Objets avec id, name, category et available_sizes
        selected_sizes: Taille choisie par id de vêtement (par défaut la taille du modèle
            si disponible, sinon la première taille disponible)

    Returns:
        Liste de dicts {garment_id, selected_size, model_size, fit_type, fit_description}
    """
    selected_sizes = selected_sizes or {}
    fits = []
    for garment in garments:
        category = garment.category
        model_size = get_model_size_for_category(
            model.upper_body_size or "M",
            model.lower_body_size or "M",
            model.shoe_size or "28",
            category,
        )
        available = list(garment.available_sizes or [])
        selected = selected_sizes.get(str(garment.id))
        if not selected:
            selected = model_size if model_size in available or not available else available[0]

        fit_type = determine_fit_type(selected, model_size, category)
        fits.append(
            {
                "garment_id": str(garment.id),
                "selected_size": selected,
                "model_size": model_size,
                "fit_type": fit_type.value,
                "fit_description": generate_fit_description(fit_type, garment.name, category),
            }
        )
    return fits
