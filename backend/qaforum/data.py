"""Demo questions and answers seeded into the in-memory store."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .domain.question import Answer, Question, utcnow

DEMO_QUESTIONS: List[Dict] = [
    {
        "id": "demo-1",
        "title": "How to join 2 columns in a data set to make a separate column in SQL",
        "content": "<p>I have first_name and last_name columns and want a third column combining both. "
        "I tried CONCAT but I'm not sure about the syntax.</p>",
        "tags": ["sql", "database", "concat"],
        "author_id": "demo-user-1",
        "hours_ago": 2,
        "answer_count": 2,
        "vote_score": 15,
    },
    {
        "id": "demo-2",
        "title": "React useState not updating immediately",
        "content": "<p>I call setState but console.log right after still shows the old value.</p>",
        "tags": ["react", "javascript", "hooks"],
        "author_id": "demo-user-2",
        "hours_ago": 4,
        "answer_count": 2,
        "vote_score": 8,
    },
    {
        "id": "demo-3",
        "title": "Python list comprehension vs for loop performance",
        "content": "<p>Is a list comprehension really faster than an explicit loop with append?</p>",
        "tags": ["python", "performance"],
        "author_id": "demo-user-3",
        "hours_ago": 6,
        "answer_count": 0,
        "vote_score": 23,
    },
    {
        "id": "demo-4",
        "title": "How to center a div horizontally and vertically",
        "content": "<p>Flexbox, grid, absolute positioning: which is the modern way?</p>",
        "tags": ["css", "html", "flexbox"],
        "author_id": "demo-user-4",
        "hours_ago": 1,
        "answer_count": 0,
        "vote_score": 4,
    },
    {
        "id": "demo-5",
        "title": "Git merge vs rebase: when should I use each?",
        "content": "<p>Our team argues about merge commits versus a linear history.</p>",
        "tags": ["git", "version-control"],
        "author_id": "demo-user-5",
        "hours_ago": 24,
        "answer_count": 5,
        "vote_score": 31,
    },
    {
        "id": "demo-6",
        "title": "Handling async errors in Express middleware",
        "content": "<p>Rejected promises in my route handlers never reach the error middleware.</p>",
        "tags": ["node.js", "express", "async"],
        "author_id": "demo-user-6",
        "hours_ago": 10,
        "answer_count": 1,
        "vote_score": 18,
    },
    {
        "id": "demo-7",
        "title": "Docker container exits immediately after start",
        "content": "<p>docker run starts my image and it stops right away with code 0.</p>",
        "tags": ["docker", "devops"],
        "author_id": "demo-user-7",
        "hours_ago": 3,
        "answer_count": 0,
        "vote_score": 12,
    },
    {
        "id": "demo-8",
        "title": "TypeScript generic constraint with keyof",
        "content": "<p>How do I restrict a generic parameter to keys of another type?</p>",
        "tags": ["typescript", "generics"],
        "author_id": "demo-user-8",
        "hours_ago": 16,
        "answer_count": 3,
        "vote_score": 25,
    },
    {
        "id": "demo-9",
        "title": "Best way to manage global state in a large React app",
        "content": "<p>Context, Redux or something else for a big application?</p>",
        "tags": ["react", "state-management", "redux"],
        "author_id": "demo-user-9",
        "hours_ago": 12,
        "answer_count": 4,
        "vote_score": 19,
    },
    {
        "id": "demo-10",
        "title": "CSS Grid vs Flexbox: When to use each?",
        "content": "<p>For a page with header, nav, main, aside and footer, which layout system fits?</p>",
        "tags": ["css", "grid", "flexbox"],
        "author_id": "demo-user-10",
        "hours_ago": 8,
        "answer_count": 3,
        "vote_score": 14,
    },
]

DEMO_ANSWERS: List[Dict] = [
    {
        "id": "demo-answer-1",
        "question_id": "demo-1",
        "content": "<p>Use <code>SELECT CONCAT(first_name, ' ', last_name) AS full_name FROM users;</code></p>",
        "author_id": "demo-user-11",
        "hours_ago": 1,
        "vote_score": 12,
        "is_accepted": True,
    },
    {
        "id": "demo-answer-2",
        "question_id": "demo-1",
        "content": "<p>On PostgreSQL and SQLite the <code>||</code> operator works as well.</p>",
        "author_id": "demo-user-12",
        "hours_ago": 1,
        "vote_score": 8,
        "is_accepted": False,
    },
    {
        "id": "demo-answer-3",
        "question_id": "demo-2",
        "content": "<p>State updates are batched; read the new value in an effect or use the updater form.</p>",
        "author_id": "demo-user-13",
        "hours_ago": 3,
        "vote_score": 15,
        "is_accepted": True,
    },
    {
        "id": "demo-answer-4",
        "question_id": "demo-2",
        "content": "<p>console.log runs before the re-render, so it still sees the previous closure.</p>",
        "author_id": "demo-user-14",
        "hours_ago": 2,
        "vote_score": 6,
        "is_accepted": False,
    },
]


def _ago(now: datetime, hours: int) -> datetime:
    return now - timedelta(hours=hours)


def demo_questions(now: Optional[datetime] = None) -> List[Question]:
    now = now or utcnow()
    return [
        Question(
            id=item["id"],
            title=item["title"],
            content=item["content"],
            author_id=item["author_id"],
            created_at=_ago(now, item["hours_ago"]),
            updated_at=_ago(now, item["hours_ago"]),
            tags=tuple(item["tags"]),
            answer_count=item["answer_count"],
            vote_score=item["vote_score"],
        )
        for item in DEMO_QUESTIONS
    ]


def demo_answers(now: Optional[datetime] = None) -> List[Answer]:
    now = now or utcnow()
    return [
        Answer(
            id=item["id"],
            question_id=item["question_id"],
            content=item["content"],
            author_id=item["author_id"],
            created_at=_ago(now, item["hours_ago"]),
            updated_at=_ago(now, item["hours_ago"]),
            vote_score=item["vote_score"],
            is_accepted=item["is_accepted"],
        )
        for item in DEMO_ANSWERS
    ]
