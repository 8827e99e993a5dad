"""Static learning-material listings for each education level."""

from __future__ import annotations

from ges_annex.constants.quiz_constants import EDUCATION_LEVELS
from ges_annex.core.models import LearningMaterial

_MATERIALS: tuple[LearningMaterial, ...] = (
    LearningMaterial("Basic", "English Language", "Phonics and Reading", "Letter sounds, blending, and short reading passages."),
    LearningMaterial("Basic", "Mathematics", "Numbers and Operations", "Counting, place value, addition and subtraction."),
    LearningMaterial("Basic", "Science", "Our Environment", "Living and non-living things, plants, and animals."),
    LearningMaterial("JHS", "Mathematics", "Algebraic Expressions", "Simplifying expressions and solving linear equations."),
    LearningMaterial("JHS", "Integrated Science", "Matter and Energy", "States of matter, forms of energy, and simple machines."),
    LearningMaterial("JHS", "Social Studies", "Our Nation Ghana", "Government, citizenship, and national symbols."),
    LearningMaterial("JHS", "English Language", "Comprehension and Composition", "Reading for meaning and structured essay writing."),
    LearningMaterial("SHS", "Core Mathematics", "Sets and Logic", "Set notation, Venn diagrams, and logical reasoning."),
    LearningMaterial("SHS", "Elective Physics", "Mechanics", "Motion, forces, work, energy, and power."),
    LearningMaterial("SHS", "Integrated Science", "Cells and Tissues", "Cell structure, division, and tissue types."),
    LearningMaterial("SHS", "English Language", "Literature Set Texts", "Study guides for the prescribed prose, poetry, and drama."),
)


class MaterialsCatalog:
    """Read-only listing of learning materials, optionally filtered by level."""

    def __init__(self, materials: tuple[LearningMaterial, ...] = _MATERIALS) -> None:
        self._materials = materials

    @staticmethod
    def levels() -> tuple[str, ...]:
        return EDUCATION_LEVELS

    def list_materials(self, level: str | None = None) -> list[LearningMaterial]:
        if level is None:
            return list(self._materials)
        matched = _match_level(level)
        if matched is None:
            raise ValueError(f"Unknown level '{level}'. Choose one of: {', '.join(EDUCATION_LEVELS)}.")
        return [material for material in self._materials if material.level == matched]

    def subjects(self, level: str) -> list[str]:
        return sorted({material.subject for material in self.list_materials(level)})


def _match_level(level: str) -> str | None:
    wanted = level.strip().lower()
    return next((known for known in EDUCATION_LEVELS if known.lower() == wanted), None)
