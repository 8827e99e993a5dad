"""Seeds an empty content store with the bundled sample quiz."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path

from ges_annex.core.errors import GesAnnexError
from ges_annex.core.quiz_importer import QuizImportError, load_quiz_from_file
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.quiz_authoring import build_definition

logger = logging.getLogger(__name__)

SEED_CREATOR_ID = "ges-annex-sample"


def seed_sample_quiz(
    store: ContentStore,
    quiz_file: Path | None,
    creator_id: str = SEED_CREATOR_ID,
) -> str | None:
    """Publish ``quiz_file`` when the store holds no quizzes; returns the new id."""
    if quiz_file is None:
        return None
    try:
        if store.list_quizzes():
            logger.info("Content store already has quizzes; skipping sample quiz")
            return None
        imported = load_quiz_from_file(Path(quiz_file))
        definition = build_definition(imported.draft, creator_id, datetime.now(timezone.utc))
        quiz_id = store.create_quiz(definition)
    except (OSError, QuizImportError, GesAnnexError) as exc:
        logger.warning("Could not seed sample quiz from %s: %s", quiz_file, exc)
        return None
    logger.info("Seeded sample quiz %s from %s", quiz_id, quiz_file)
    return quiz_id
