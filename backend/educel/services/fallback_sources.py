"""Fallback source resolver — deterministic citations when the model omits them."""

from educel.services.topics import normalize_topic

CATEGORY_SOURCES: dict[str, list[dict]] = {
    "productivity": [
        {"title": "Harvard Business Review — Productivity", "url": "https://hbr.org/topic/subject/productivity"},
        {"title": "Cal Newport — Deep Work", "url": "https://calnewport.com/deep-work-rules-for-focused-success-in-a-distracted-world/"},
    ],
    "communication": [
        {"title": "Harvard Business Review — Communication", "url": "https://hbr.org/topic/subject/communication"},
        {"title": "Stanford GSB — Insights on Communication", "url": "https://www.gsb.stanford.edu/insights/communication"},
    ],
    "leadership": [
        {"title": "Harvard Business Review — Leadership", "url": "https://hbr.org/topic/subject/leadership"},
        {"title": "McKinsey — Leadership Insights", "url": "https://www.mckinsey.com/featured-insights/leadership"},
    ],
    "psychology": [
        {"title": "American Psychological Association — Topics", "url": "https://www.apa.org/topics"},
        {"title": "Psychology Today — Basics", "url": "https://www.psychologytoday.com/us/basics"},
    ],
    "sales": [
        {"title": "Harvard Business Review — Sales", "url": "https://hbr.org/topic/subject/sales"},
        {"title": "HubSpot — Sales Blog", "url": "https://blog.hubspot.com/sales"},
    ],
    "negotiation": [
        {"title": "Harvard Program on Negotiation", "url": "https://www.pon.harvard.edu/daily/"},
        {"title": "Harvard Business Review — Negotiations", "url": "https://hbr.org/topic/subject/negotiations"},
    ],
    "writing": [
        {"title": "Purdue Online Writing Lab", "url": "https://owl.purdue.edu/owl/purdue_owl.html"},
        {"title": "Harvard Business Review — Business Writing", "url": "https://hbr.org/topic/subject/business-writing"},
    ],
    "design": [
        {"title": "Nielsen Norman Group — Articles", "url": "https://www.nngroup.com/articles/"},
        {"title": "IDEO U — Design Thinking", "url": "https://www.ideou.com/pages/design-thinking"},
    ],
    "finance": [
        {"title": "Investopedia — Personal Finance", "url": "https://www.investopedia.com/personal-finance-4427760"},
        {"title": "Khan Academy — Economics & Finance", "url": "https://www.khanacademy.org/economics-finance-domain"},
    ],
    "health": [
        {"title": "Mayo Clinic — Healthy Lifestyle", "url": "https://www.mayoclinic.org/healthy-lifestyle"},
        {"title": "Harvard Health Publishing", "url": "https://www.health.harvard.edu/topics/staying-healthy"},
    ],
    "history": [
        {"title": "Encyclopaedia Britannica — History", "url": "https://www.britannica.com/topic/history"},
        {"title": "Smithsonian Magazine — History", "url": "https://www.smithsonianmag.com/history/"},
    ],
    "technology": [
        {"title": "MIT Technology Review", "url": "https://www.technologyreview.com/"},
        {"title": "Wired — Science & Technology", "url": "https://www.wired.com/category/science/"},
    ],
    "career": [
        {"title": "Harvard Business Review — Career Planning", "url": "https://hbr.org/topic/subject/career-planning"},
        {"title": "LinkedIn Learning — Career Development", "url": "https://www.linkedin.com/learning/topics/career-development"},
    ],
    "entrepreneurship": [
        {"title": "Y Combinator — Startup Library", "url": "https://www.ycombinator.com/library"},
        {"title": "Harvard Business Review — Entrepreneurship", "url": "https://hbr.org/topic/subject/entrepreneurship"},
    ],
    "decision": [
        {"title": "Farnam Street — Decision Making", "url": "https://fs.blog/smart-decisions/"},
        {"title": "Harvard Business Review — Decision Making", "url": "https://hbr.org/topic/subject/decision-making-and-problem-solving"},
    ],
}

KEYWORD_CATEGORIES: dict[str, str] = {
    "invest": "finance",
    "money": "finance",
    "budget": "finance",
    "stock": "finance",
    "startup": "entrepreneurship",
    "founder": "entrepreneurship",
    "business": "entrepreneurship",
    "manage": "leadership",
    "team": "leadership",
    "habit": "productivity",
    "focus": "productivity",
    "time": "productivity",
    "speak": "communication",
    "present": "communication",
    "feedback": "communication",
    "persua": "sales",
    "pitch": "sales",
    "fitness": "health",
    "sleep": "health",
    "nutrition": "health",
    "artificial intelligence": "technology",
    "machine learning": "technology",
    "software": "technology",
    "data": "technology",
    "job": "career",
    "interview": "career",
    "promotion": "career",
    "bias": "psychology",
    "motivation": "psychology",
    "ux": "design",
    "brand": "design",
    "essay": "writing",
    "email": "writing",
    "deal": "negotiation",
    "strategy": "decision",
    "choice": "decision",
}

DEFAULT_SOURCES: list[dict] = [
    {"title": "Harvard Business Review", "url": "https://hbr.org/"},
    {"title": "Encyclopaedia Britannica", "url": "https://www.britannica.com/"},
    {"title": "Khan Academy", "url": "https://www.khanacademy.org/"},
]


def resolve_category(topic: str) -> str | None:
    normalized = normalize_topic(topic)
    for category in CATEGORY_SOURCES:
        if category in normalized:
            return category
    for keyword, category in KEYWORD_CATEGORIES.items():
        if keyword in normalized:
            return category
    return None


def resolve_fallback_sources(topic: str) -> list[dict]:
    """Return citation entries for ``topic``; never empty."""
    category = resolve_category(topic or "")
    sources = CATEGORY_SOURCES[category] if category else DEFAULT_SOURCES
    return [dict(source) for source in sources]
