from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str
    prompt: str
    target: str
    category: str


LESSON_CATEGORIES = {
    "letters": "Letters",
    "numbers": "Numbers",
    "birds": "Birds",
    "animals": "Animals",
}


def _lessons(category: str, *rows: tuple[str, str, str, str]) -> list[Lesson]:
    return [
        Lesson(lesson_id, title, prompt, target, category)
        for lesson_id, title, prompt, target in rows
    ]


LESSONS: dict[str, list[Lesson]] = {
    "letters": _lessons(
        "letters",
        ("letter-a", "Letter A", "A as in Apple", "A"),
        ("letter-b", "Letter B", "B as in Ball", "B"),
        ("letter-c", "Letter C", "C as in Cat", "C"),
    ),
    "numbers": _lessons(
        "numbers",
        ("number-1", "Number 1", "One", "One"),
        ("number-2", "Number 2", "Two", "Two"),
        ("number-3", "Number 3", "Three", "Three"),
    ),
    "birds": _lessons(
        "birds",
        ("bird-parrot", "Parrot", "Parrot says hello", "Parrot"),
        ("bird-sparrow", "Sparrow", "Small and quick", "Sparrow"),
        ("bird-peacock", "Peacock", "Beautiful feathers", "Peacock"),
    ),
    "animals": _lessons(
        "animals",
        ("animal-cat", "Cat", "Meow", "Cat"),
        ("animal-dog", "Dog", "Woof", "Dog"),
        ("animal-elephant", "Elephant", "Big and gentle", "Elephant"),
    ),
}


def get_lesson(lesson_id: str) -> Optional[Lesson]:
    for lessons in LESSONS.values():
        for lesson in lessons:
            if lesson.id == lesson_id:
                return lesson
    return None
