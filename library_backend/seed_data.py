"""
Default catalog titles used to populate an empty database.
"""

from library_backend.domain.entities import CatalogBook

DEFAULT_BOOKS = [
    CatalogBook(
        isbn="9789865020059",
        title="Atomic Habits",
        author="James Clear",
        description=(
            "A practical guide to building good habits and breaking bad ones, "
            "distilled from behavioural science."
        ),
        image_url="https://example.com/atomic-habits.jpg",
    ),
    CatalogBook(
        isbn="9789865020060",
        title="Deep Work",
        author="Cal Newport",
        description=(
            "Strategies for cultivating focused, distraction-free work in a "
            "world full of interruptions."
        ),
        image_url="https://example.com/deep-work.jpg",
    ),
    CatalogBook(
        isbn="9789865020061",
        title="Peak",
        author="Anders Ericsson",
        description=(
            "What the research on deliberate practice says about how experts "
            "reach the top of their field."
        ),
        image_url="https://example.com/deliberate-practice.jpg",
    ),
    CatalogBook(
        isbn="9789865020062",
        title="Flow",
        author="Mihaly Csikszentmihalyi",
        description=(
            "On the state of complete absorption in an activity and how to "
            "make it part of everyday life."
        ),
        image_url="https://example.com/flow.jpg",
    ),
    CatalogBook(
        isbn="9789865020063",
        title="Thinking, Fast and Slow",
        author="Daniel Kahneman",
        description=(
            "The two systems of human thinking: fast and intuitive, slow and "
            "deliberate."
        ),
        image_url="https://example.com/thinking-fast-and-slow.jpg",
    ),
]
