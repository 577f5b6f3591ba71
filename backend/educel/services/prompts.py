"""Prompt construction for every generation type."""

from dataclasses import dataclass, field

from educel.schemas.generation import GenerateRequest
from educel.services.errors import InvalidRequestError, UnknownGenerationTypeError

ALLOWED_SOURCE_DOMAINS = (
    "hbr.org",
    "mckinsey.com",
    "nature.com",
    "sciencedirect.com",
    "ncbi.nlm.nih.gov",
    "apa.org",
    "britannica.com",
    "wikipedia.org",
    "khanacademy.org",
    "investopedia.com",
    "mayoclinic.org",
    "health.harvard.edu",
    "technologyreview.com",
    "nngroup.com",
    "ycombinator.com",
    "pon.harvard.edu",
    "gsb.stanford.edu",
    "sloanreview.mit.edu",
)

MIN_PLAN_DAYS = 7
MAX_PLAN_DAYS = 14

JSON_RETRY_REMINDER = (
    "IMPORTANT: Your previous response was not valid JSON or did not match the "
    "required structure. Respond with ONLY the JSON object, no markdown "
    "formatting or additional text."
)


@dataclass
class PersonalizationHints:
    top_topic: str | None = None
    avoid_topics: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


def system_prompt(depth: str) -> str:
    depth_instruction = (
        "Provide slightly more context and nuance while remaining practical."
        if depth == "deeper"
        else "Keep content crisp and scannable. Prioritize actionable insights over depth."
    )
    return f"""You are Educel, an AI knowledge assistant for busy professionals and founders.

Tone Guidelines:
- Calm, smart, slightly analytical
- Practical and insightful, never motivational or cheesy
- Use professional/founder-relevant examples
- Avoid medical or legal advice; if requested, provide general info and suggest verification

Content Rules:
- {depth_instruction}
- Make every word count
- Focus on actionable, memorable insights
- Use concrete examples from business, technology, or professional contexts

You MUST respond with valid JSON only. No markdown, no explanation, just the JSON object."""


def _require(value, name: str, gen_type: str):
    if not value:
        raise InvalidRequestError(f"Missing required field for {gen_type}: {name}")
    return value


def _topic_options(req: GenerateRequest, hints: PersonalizationHints) -> str:
    preferred = _require([t for t in req.preferred_topics if t.strip()], "preferred_topics", req.type)
    lines = [f"Generate 3 learning topic suggestions based on these preferred areas: {', '.join(preferred)}"]
    if hints.top_topic:
        lines.append(
            f'\nThe user has engaged most with "{hints.top_topic}" recently. One suggestion may '
            "build on it, but the three suggestions must stay diverse."
        )
    else:
        lines.append("\nKeep the three suggestions diverse.")
    if hints.avoid_topics:
        avoid = "; ".join(hints.avoid_topics)
        lines.append(f"\nDo NOT suggest these recently shown topics (or close variants): {avoid}")
    lines.append(
        """
Respond with ONLY this JSON structure:
{
  "options": [
    {"topic": "Specific topic title", "hook": "One intriguing line about why this matters"},
    {"topic": "Specific topic title", "hook": "One intriguing line about why this matters"},
    {"topic": "Specific topic title", "hook": "One intriguing line about why this matters"}
  ]
}

Return exactly 3 options. Make topics specific and immediately actionable (not broad categories). Hooks should create curiosity."""
    )
    return "\n".join(lines)


def _adjacent_options(req: GenerateRequest, hints: PersonalizationHints) -> str:
    topic = _require(req.topic, "topic", req.type)
    return f"""Based on the topic "{topic}", suggest 3 related but distinct topics the user might want to explore next.

Respond with ONLY this JSON structure:
{{
  "options": [
    {{"topic": "Adjacent topic title", "hook": "Why this connects and why it matters"}},
    {{"topic": "Adjacent topic title", "hook": "Why this connects and why it matters"}},
    {{"topic": "Adjacent topic title", "hook": "Why this connects and why it matters"}}
  ]
}}

Return exactly 3 options."""


def _clarify_topic(req: GenerateRequest, hints: PersonalizationHints) -> str:
    custom = _require(req.custom_topic, "custom_topic", req.type)
    return f"""The user wants to learn about: "{custom}"

This is too broad or vague. Generate a clarifying question with 3 specific angle options.

Respond with ONLY this JSON structure:
{{
  "question": "What angle interests you most?",
  "options": ["Specific angle 1", "Specific angle 2", "Specific angle 3"]
}}

Make options distinct and practical for a professional/founder audience."""


def _learn_item(req: GenerateRequest, hints: PersonalizationHints) -> str:
    subject = _require(req.topic or req.custom_topic, "topic", req.type)
    context = ""
    if req.type == "learn_more":
        prior = _require(req.prior_item, "prior_item", req.type)
        context = (
            f'\n\nThis is a follow-up to: "{prior.get("title", subject)}". '
            "Go deeper on a specific aspect or reveal an advanced insight."
        )
    domains = ", ".join(ALLOWED_SOURCE_DOMAINS)
    return f"""Create a micro-learning item about: "{subject}"{context}

Respond with ONLY this JSON structure:
{{
  "title": "Clear, specific title (max 10 words)",
  "hook": "One sentence that makes this feel essential to know",
  "bullets": [
    "Key insight 1 (max 16 words)",
    "Key insight 2 (max 16 words)",
    "Key insight 3 (max 16 words)"
  ],
  "example": "A concrete 2-4 sentence example, preferably from business/professional context",
  "micro_action": "One specific thing to try today (max 140 characters)",
  "quiz_question": "A thoughtful question to test understanding",
  "quiz_answer": "Brief, clear answer",
  "sources": [
    {{"title": "Source title", "url": "https://..."}}
  ]
}}

Ensure bullets are exactly 3 items. Make the micro_action immediately actionable.
Include 1-3 sources, each linking only to one of these credible root domains: {domains}.
If you are not confident a specific page exists, link the domain's root page."""


def _expand_content(req: GenerateRequest, hints: PersonalizationHints) -> str:
    prior = _require(req.prior_item, "prior_item", req.type)
    title = prior.get("title") or req.topic or "this topic"
    prior_bullets = prior.get("bullets")
    if not isinstance(prior_bullets, list):
        prior_bullets = []
    bullets = "\n".join(f"- {b}" for b in prior_bullets if isinstance(b, str))
    return f"""Expand the micro-learning item "{title}" into a short article.

Original key insights:
{bullets or "- (none provided)"}

Respond with ONLY this JSON structure:
{{
  "paragraphs": ["Paragraph 1", "Paragraph 2", "Paragraph 3"],
  "additional_bullets": ["Extra insight 1", "Extra insight 2"],
  "one_line_takeaway": "The single sentence to remember (under 100 characters)"
}}

Write between 3 and 6 paragraphs. The one_line_takeaway is required and must be under 100 characters."""


def _lesson_plan(req: GenerateRequest, hints: PersonalizationHints) -> str:
    topic = _require(req.topic, "topic", req.type)
    prior = _require(req.prior_item, "prior_item", req.type)
    domains = ", ".join(ALLOWED_SOURCE_DOMAINS)
    return f"""Create a structured self-study lesson plan for: "{topic}"
It builds on the micro-learning item "{prior.get("title", topic)}".

Respond with ONLY this JSON structure:
{{
  "goals": ["Learning goal 1", "Learning goal 2"],
  "resources": [
    {{"title": "Resource title", "url": "https://...", "type": "article"}}
  ],
  "exercises": ["Practical exercise 1", "Practical exercise 2"],
  "daily_plan": [
    {{"day": 1, "focus": "Focus of the day", "activities": ["Activity 1", "Activity 2"]}}
  ]
}}

Rules:
- At least 2 goals, at least 3 resources, at least 2 exercises.
- Resource type is one of: article, video, book, course, tool.
- Prefer resources hosted on these credible root domains: {domains}.
- The daily_plan covers between {MIN_PLAN_DAYS} and {MAX_PLAN_DAYS} days, numbered from 1."""


_BUILDERS = {
    "topic_options": _topic_options,
    "adjacent_options": _adjacent_options,
    "clarify_topic": _clarify_topic,
    "learn_item": _learn_item,
    "learn_more": _learn_item,
    "expand_content": _expand_content,
    "lesson_plan": _lesson_plan,
}


def build_prompt(req: GenerateRequest, hints: PersonalizationHints | None = None) -> Prompt:
    builder = _BUILDERS.get(req.type)
    if builder is None:
        raise UnknownGenerationTypeError(req.type)
    return Prompt(system=system_prompt(req.depth), user=builder(req, hints or PersonalizationHints()))
