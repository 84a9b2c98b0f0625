"""
Seven-day interview preparation plans.
"""
from typing import Dict, List

from schemas import PrepDay, PrepPlan

DEFAULT_ROLE = "Software Engineer"

PREP_PLANS: Dict[str, Dict[str, PrepDay]] = {
    "Software Engineer": {
        "Day 1: Technical Fundamentals": PrepDay(
            title="Data Structures & Algorithms",
            tasks=[
                "Review core data structures (Arrays, Linked Lists, Trees, Graphs)",
                "Practice basic algorithms (Sorting, Searching, BFS/DFS)",
                "Solve 2-3 LeetCode easy/medium problems",
            ],
            resources=[
                "https://leetcode.com/problemset/all/",
                "https://www.geeksforgeeks.org/data-structures/",
            ],
        ),
        "Day 2: System Design": PrepDay(
            title="System Design Basics",
            tasks=[
                "Study system design fundamentals",
                "Practice designing a simple system (e.g., URL shortener)",
                "Review scalability concepts",
            ],
            resources=[
                "https://github.com/donnemartin/system-design-primer",
                "https://www.educative.io/courses/grokking-the-system-design-interview",
            ],
        ),
        "Day 3: Coding Practice": PrepDay(
            title="Advanced Problem Solving",
            tasks=[
                "Focus on dynamic programming problems",
                "Practice tree/graph algorithms",
                "Review time/space complexity analysis",
            ],
        ),
        "Day 4: System Architecture": PrepDay(
            title="Distributed Systems",
            tasks=[
                "Study distributed systems concepts",
                "Review database design patterns",
                "Practice system design questions",
            ],
        ),
        "Day 5: Behavioral Prep": PrepDay(
            title="Behavioral & Leadership",
            tasks=[
                "Prepare STAR format responses",
                "Practice leadership questions",
                "Review past projects for examples",
            ],
        ),
        "Day 6: Mock Interviews": PrepDay(
            title="Practice Interviews",
            tasks=[
                "Schedule mock technical interviews",
                "Practice coding on a whiteboard",
                "Record and review your performance",
            ],
        ),
        "Day 7: Final Review": PrepDay(
            title="Comprehensive Review",
            tasks=[
                "Review all technical concepts",
                "Practice time management",
                "Prepare questions for interviewers",
            ],
        ),
    },
    "Product Manager": {
        "Day 1: Product Fundamentals": PrepDay(
            title="Core Product Concepts",
            tasks=[
                "Review product development lifecycle",
                "Study product metrics and KPIs",
                "Practice product sense questions",
            ],
            resources=[
                "https://www.productplan.com/learn/product-management-basics/",
                "https://www.mindtheproduct.com/",
            ],
        ),
        "Day 2: Strategy & Vision": PrepDay(
            title="Product Strategy",
            tasks=[
                "Practice product strategy questions",
                "Study market analysis frameworks",
                "Review competitive analysis techniques",
            ],
        ),
        "Day 3: User Research": PrepDay(
            title="User-Centric Design",
            tasks=[
                "Study user research methodologies",
                "Practice user interview questions",
                "Review user feedback analysis",
            ],
        ),
        "Day 4: Technical Understanding": PrepDay(
            title="Technical Knowledge",
            tasks=[
                "Review basic technical concepts",
                "Study system architecture basics",
                "Practice technical PM questions",
            ],
        ),
        "Day 5: Execution & Leadership": PrepDay(
            title="Execution Excellence",
            tasks=[
                "Study agile methodologies",
                "Practice prioritization frameworks",
                "Review stakeholder management",
            ],
        ),
        "Day 6: Analytics & Metrics": PrepDay(
            title="Data-Driven Decisions",
            tasks=[
                "Study product analytics tools",
                "Practice metrics-based questions",
                "Review A/B testing concepts",
            ],
        ),
        "Day 7: Final Preparation": PrepDay(
            title="Comprehensive Review",
            tasks=[
                "Review all product concepts",
                "Practice case studies",
                "Prepare questions for interviewers",
            ],
        ),
    },
}


def available_roles() -> List[str]:
    return list(PREP_PLANS)


def get_prep_plan(role: str = DEFAULT_ROLE) -> PrepPlan:
    """Raises KeyError for an unknown role."""
    return PrepPlan(role=role, days=PREP_PLANS[role])
