# services/personalized_paper_service.py
"""
Weekly personalized reading selection.

For one student and one course week, an LLM picks three papers from the
pool, the answer is validated and matched back to the pool, and the ranked
result replaces whatever was stored for that (user, week) before.
"""
import json
import os
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy.orm import Session

from database.models.paper_model import Paper, PersonalizedPaper
from services.course_info import extract_relevant_interests, get_context_for_week, get_week_topic
from services.errors import InsufficientPapersError, InvalidRequestError, NotFoundError, UpstreamParseError
from services.llm_service import CompletionClient, LLMJSONParseError, parse_json_text
from services.paper_pool_service import (
    get_existing_selections,
    get_paper_ids_recommended_elsewhere,
    get_student_profile,
    list_all_papers,
    list_user_selections,
    selection_to_dict,
)
from services.regeneration_lock import KeyedLock
from services.selection_store import replace_selections

logger = logging.getLogger(__name__)

SELECTION_SIZE = 3
ABSTRACT_PROMPT_LIMIT = 500

PAPER_MATCH_MODEL = os.getenv("PAPER_MATCH_MODEL", "gpt-5-mini")
PAPER_MATCH_TEMPERATURE = float(os.getenv("PAPER_MATCH_TEMPERATURE", "1.0"))

_regeneration_lock = KeyedLock()


class SelectionMode:
    BEST_EFFORT = "best_effort"  # drop unknown paper ids, keep the rest
    STRICT = "strict"            # any unknown paper id rejects the answer

    ALL = (BEST_EFFORT, STRICT)


def selection_mode_from_env() -> str:
    mode = os.getenv("PAPER_SELECTION_MODE", SelectionMode.BEST_EFFORT).strip().lower()
    if mode not in SelectionMode.ALL:
        logger.warning(f"Unknown PAPER_SELECTION_MODE '{mode}', using {SelectionMode.BEST_EFFORT}")
        return SelectionMode.BEST_EFFORT
    return mode


class PaperRecommendation(BaseModel):
    """One entry of the model's JSON answer."""
    model_config = ConfigDict(populate_by_name=True)

    paper_id: str = Field(alias="paperID", min_length=1)
    relevance_ranking: int = Field(alias="relevanceRanking")
    matching_reason: str = Field(default="", alias="matchingReason")

    @field_validator("paper_id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("matching_reason", mode="before")
    @classmethod
    def _reason_default(cls, value):
        return "" if value is None else value


def _summarize_paper(paper: Paper) -> Dict[str, Any]:
    abstract = paper.abstract[:ABSTRACT_PROMPT_LIMIT] + "..." if paper.abstract else "No abstract available"
    return {
        "id": paper.id,
        "paperID": paper.paper_id,
        "title": paper.title,
        "authors": paper.authors,
        "abstract": abstract,
        "tldr": paper.tldr or "",
        "topics": paper.topics or "",
        "category": paper.category,
    }


def build_prompts(week_number: str, persona, survey, candidates: Sequence[Paper], excluded_count: int):
    """Returns (system_prompt, user_prompt) for the matching call."""
    course_context = get_context_for_week(week_number)
    student_interests = extract_relevant_interests(persona, survey)

    system_prompt = f"""You are an expert academic advisor specializing in communication, psychology, and AI research. Your task is to recommend the most relevant papers from a collection for a specific student based on their interests and the course context.

{course_context}

Student Profile:
{student_interests}

IMPORTANT CONTEXT:
- This student has already been recommended {excluded_count} papers in previous weeks
- The papers provided below have been filtered to EXCLUDE any previously recommended papers
- Available papers for this week: {len(candidates)}

Instructions:
1. Analyze each paper against the student's research interests, academic background, and learning goals
2. Consider the weekly topic and how each paper relates to it
3. Prioritize papers that align with both the student's interests AND the course objectives
4. Ensure diversity in perspectives, methodologies, and specific topics within the week's theme
5. Select exactly {SELECTION_SIZE} papers and rank them 1-{SELECTION_SIZE} (1 being most relevant)
6. For each selected paper, provide a brief explanation of why it matches the student's interests

Respond with ONLY a JSON array in this exact format:
[
  {{
    "paperID": "paper_semantic_scholar_id",
    "relevanceRanking": 1,
    "matchingReason": "Brief explanation of why this paper is relevant to the student"
  }}
]

Be precise and only return the JSON array."""

    summaries = [_summarize_paper(p) for p in candidates]
    user_prompt = f"""Papers available:
{json.dumps(summaries, indent=2)}

Please select and rank the top {SELECTION_SIZE} most relevant papers for this student for week {week_number}."""

    return system_prompt, user_prompt


def parse_recommendations(text: str) -> List[PaperRecommendation]:
    """
    Parse and validate the completion text.
    Requires a JSON array of exactly SELECTION_SIZE entries, distinct paper
    ids, and ranks forming exactly 1..SELECTION_SIZE.
    Raises:
        UpstreamParseError: On any deviation.
    """
    try:
        payload = parse_json_text(text)
    except LLMJSONParseError as e:
        raise UpstreamParseError("Failed to process AI recommendations") from e

    if not isinstance(payload, list) or len(payload) != SELECTION_SIZE:
        raise UpstreamParseError(f"Invalid AI response format - expected exactly {SELECTION_SIZE} papers")

    try:
        recommendations = [PaperRecommendation.model_validate(item) for item in payload]
    except ValidationError as e:
        logger.error(f"AI recommendation entries failed validation: {e}")
        raise UpstreamParseError("Invalid AI response format - malformed recommendation entry") from e

    ranks = sorted(r.relevance_ranking for r in recommendations)
    if ranks != list(range(1, SELECTION_SIZE + 1)):
        raise UpstreamParseError(f"Invalid AI response format - rankings must be 1 to {SELECTION_SIZE} without repeats, got {ranks}")

    paper_ids = [r.paper_id for r in recommendations]
    if len(set(paper_ids)) != len(paper_ids):
        raise UpstreamParseError("Invalid AI response format - the same paper was recommended twice")

    return recommendations


def reconcile(
    recommendations: Sequence[PaperRecommendation],
    candidates: Sequence[Paper],
    week_number: str,
    mode: str = SelectionMode.BEST_EFFORT,
) -> List[Dict[str, Any]]:
    """
    Match recommendations back to candidate papers and build row values.
    Unknown ids are dropped with a warning in best-effort mode and rejected
    in strict mode.
    """
    by_id = {paper.paper_id: paper for paper in candidates}
    unknown = [r.paper_id for r in recommendations if r.paper_id not in by_id]

    if unknown and mode == SelectionMode.STRICT:
        raise UpstreamParseError(f"AI recommended papers outside the candidate pool: {', '.join(unknown)}")

    week_topic = get_week_topic(week_number)
    entries = []
    for rec in sorted(recommendations, key=lambda r: r.relevance_ranking):
        paper = by_id.get(rec.paper_id)
        if paper is None:
            logger.warning(f"Paper not found in available papers: {rec.paper_id}")
            continue

        entries.append({
            "paper_id": paper.paper_id,
            "title": paper.title,
            "authors": paper.authors,
            "abstract": paper.abstract,
            "tldr": paper.tldr,
            "topics": paper.topics,
            "keywords": paper.keywords,
            "category": paper.category,
            "url": paper.url,
            "doi": paper.doi,
            "open_access_pdf": paper.open_access_pdf,
            "week_topic": week_topic,
            "relevance_ranking": rec.relevance_ranking,
            "matching_reason": rec.matching_reason,
        })
    return entries


def _ranked(rows: Sequence[PersonalizedPaper]) -> List[Dict[str, Any]]:
    return [selection_to_dict(r) for r in sorted(rows, key=lambda r: (r.relevance_ranking, r.id))]


def get_personalized_papers(db: Session, user_id: Optional[int], week_number: Optional[str] = None) -> List[Dict[str, Any]]:
    if not user_id:
        raise InvalidRequestError("User ID is required")
    if week_number:
        return _ranked(get_existing_selections(db, user_id, str(week_number).strip()))
    return [selection_to_dict(r) for r in list_user_selections(db, user_id)]


def generate_personalized_papers(
    db: Session,
    completion_client: CompletionClient,
    user_id: Optional[int],
    week_number: Optional[str],
    force_regenerate: bool = False,
    mode: Optional[str] = None,
    lock: Optional[KeyedLock] = None,
) -> Dict[str, Any]:
    """
    Return the student's selection for the week, generating it if needed.

    Without force_regenerate an existing selection is returned as is and no
    completion is requested. Regenerations for one (user, week) key run one
    at a time. Nothing is deleted until the new answer has been validated.

    Returns {"message": str, "papers": [...], "generated": bool}.
    """
    if not user_id or not week_number:
        raise InvalidRequestError("User ID and week number are required")

    week_number = str(week_number).strip()
    mode = mode or selection_mode_from_env()
    lock = lock or _regeneration_lock

    if not force_regenerate:
        existing = get_existing_selections(db, user_id, week_number)
        if existing:
            return {
                "message": "Personalized papers already exist for this week",
                "papers": _ranked(existing),
                "generated": False,
            }

    with lock.hold(user_id, week_number):
        if not force_regenerate:
            # Another request may have finished while we waited
            db.expire_all()
            existing = get_existing_selections(db, user_id, week_number)
            if existing:
                return {
                    "message": "Personalized papers already exist for this week",
                    "papers": _ranked(existing),
                    "generated": False,
                }

        persona, survey = get_student_profile(db, user_id)
        if persona is None and survey is None:
            raise NotFoundError("No user profile data found. Please complete your persona card first.")

        pool = list_all_papers(db)
        if not pool:
            raise NotFoundError("No papers available in the paper pool")

        excluded = get_paper_ids_recommended_elsewhere(db, user_id, week_number)
        candidates = [paper for paper in pool if paper.paper_id not in excluded]
        logger.info(
            f"Found {len(pool)} total papers, {len(excluded)} already recommended, "
            f"{len(candidates)} available for user {user_id}, week {week_number}"
        )
        if len(candidates) < SELECTION_SIZE:
            raise InsufficientPapersError(
                f"Insufficient unique papers available. Only {len(candidates)} papers remain "
                f"that haven't been recommended to this user."
            )

        system_prompt, user_prompt = build_prompts(week_number, persona, survey, candidates, len(excluded))
        text = completion_client.complete(
            user_prompt,
            system_prompt=system_prompt,
            model=PAPER_MATCH_MODEL,
            temperature=PAPER_MATCH_TEMPERATURE,
        )

        recommendations = parse_recommendations(text)
        entries = reconcile(recommendations, candidates, week_number, mode=mode)
        rows = replace_selections(db, user_id, week_number, entries)

        if len(rows) != SELECTION_SIZE:
            logger.warning(f"Generated {len(rows)} papers instead of {SELECTION_SIZE} for user {user_id}, week {week_number}")

        return {
            "message": f"Generated {len(rows)} personalized papers for week {week_number}",
            "papers": _ranked(rows),
            "generated": True,
        }
