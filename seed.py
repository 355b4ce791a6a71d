"""
Seed demo resources and course statistics

Replaces the contents of the `resource` and `coursestats` collections with a
small demo catalog. Course stats are only ever written here; the API reads
them as-is.

Run with: python seed.py
"""
import random
import sys
from typing import List

import database
from catalog import quality_from_completeness
from logging_config import logger
from schemas import Coursestats, Resource

ACTIVITY_DAYS = 364
DEMO_PDF = "https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf"


def generate_activity_grid(rng: random.Random) -> List[int]:
    return [rng.randint(1, 4) if rng.random() > 0.7 else 0 for _ in range(ACTIVITY_DAYS)]


DEMO_RESOURCES = [
    {
        "title": "BMAT202L - Probability Handwritten Complete",
        "course_code": "BMAT202L",
        "slot": "B1",
        "type": "Notes",
        "topics": ["Probability", "Bayes Theorem", "Random Variables"],
        "completeness": 88,
        "upvotes": 147,
        "downloads": 289,
        "views": 1205,
        "author": "stat_god_99",
        "professor": "Prof. Sharma",
        "semester": "Winter",
        "year": "2024",
        "description": "Detailed handwritten notes covering Module 1-3.",
    },
    {
        "title": "Unit 4: Hypothesis Testing Cheatsheet",
        "course_code": "BMAT202L",
        "slot": "G2",
        "type": "Cheatsheet",
        "topics": ["Hypothesis Testing", "T-Test", "Chi-Square"],
        "completeness": 45,
        "upvotes": 67,
        "downloads": 150,
        "views": 560,
        "author": "cram_master",
        "professor": "Prof. Gupta",
        "semester": "Fall",
        "year": "2023",
        "description": "Concise formula sheet for quick revision.",
    },
    {
        "title": "Physics Wave Optics Solutions",
        "course_code": "PHY101",
        "slot": "A1",
        "type": "Solution",
        "topics": ["Interference", "Diffraction", "Polarization"],
        "completeness": 100,
        "upvotes": 23,
        "downloads": 45,
        "views": 120,
        "author": "physics_enthusiast",
        "professor": "Dr. Ray",
        "semester": "Winter",
        "year": "2023",
        "description": "Solved past papers for the Wave Optics module.",
    },
    {
        "title": "Full Semester 3 Review",
        "course_code": "CSE3001",
        "slot": "C2",
        "type": "Notes",
        "topics": ["Software Eng", "Agile", "UML", "Testing"],
        "completeness": 95,
        "upvotes": 310,
        "downloads": 890,
        "views": 3400,
        "author": "topper_supreme",
        "professor": "Dr. Iyer",
        "semester": "Fall",
        "year": "2024",
    },
]

DEMO_COURSE_STATS = [
    {
        "course_code": "BMAT202L",
        "completeness": 82,
        "quality_avg": 88,
        "total_resources": 45,
        "topic_coverage": [
            {"topic": "Probability", "coverage": 95},
            {"topic": "Statistics", "coverage": 80},
            {"topic": "Lin. Algebra", "coverage": 40},
            {"topic": "Calculus", "coverage": 90},
            {"topic": "Hypothesis", "coverage": 75},
        ],
    },
    {
        "course_code": "CSE3001",
        "completeness": 76,
        "quality_avg": 91,
        "total_resources": 32,
        "topic_coverage": [
            {"topic": "SDLC", "coverage": 100},
            {"topic": "Testing", "coverage": 85},
            {"topic": "Design Patterns", "coverage": 70},
        ],
    },
    {
        "course_code": "PHY101",
        "completeness": 54,
        "quality_avg": 72,
        "total_resources": 18,
        "topic_coverage": [
            {"topic": "Optics", "coverage": 80},
            {"topic": "Mechanics", "coverage": 50},
            {"topic": "Thermo", "coverage": 30},
        ],
    },
]


def seed(rng: random.Random = None) -> None:
    rng = rng or random.Random()
    db = database.get_db()

    db["resource"].delete_many({})
    db["coursestats"].delete_many({})

    for item in DEMO_RESOURCES:
        resource = Resource(
            **item,
            quality_score=quality_from_completeness(item["completeness"]),
            pdf_url=DEMO_PDF,
        )
        database.create_document("resource", resource)

    for item in DEMO_COURSE_STATS:
        stats = Coursestats(**item, activity_grid=generate_activity_grid(rng))
        database.create_document("coursestats", stats)

    database.ensure_indexes()
    logger.info(
        f"[Seed] Imported {len(DEMO_RESOURCES)} resources and {len(DEMO_COURSE_STATS)} course stats"
    )


if __name__ == "__main__":
    try:
        seed()
    except Exception as e:
        logger.error(f"[Seed] Failed: {e}")
        sys.exit(1)
    print("Data Imported!")
