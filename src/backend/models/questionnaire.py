"""
Questionnaire definitions.

Sections hold questions in one of two shapes: a plain question that uses the
option scale of its section, or a self-contained question that carries its
own options. The definitions are resolved once into a flat lookup table
keyed by question id.
"""

from dataclasses import dataclass, field
from typing import Union

LIKERT_FREQUENCY = ("Never", "Rarely", "Sometimes", "Often", "Always")
IMPORTANCE = (
    "Not important at all",
    "Slightly important",
    "Moderately important",
    "Very important",
    "Extremely important",
)
AGREEMENT = ("Strongly disagree", "Disagree", "Neutral", "Agree", "Strongly agree")
YES_NO = ("Yes", "No")


@dataclass(frozen=True)
class PlainQuestion:
    """Question text only; options come from the enclosing section."""

    text: str
    uses_section_options: bool = True


@dataclass(frozen=True)
class SelfContainedQuestion:
    """Question with its own option list."""

    text: str
    options: tuple[str, ...]


Question = Union[PlainQuestion, SelfContainedQuestion]


@dataclass(frozen=True)
class Section:
    key: str
    title: str
    questions: dict[str, Question]
    options: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class QuestionDefinition:
    """Resolved question: everything a client needs to render and tally it."""

    question_id: str
    section: str
    text: str
    options: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "section": self.section,
            "options": list(self.options),
        }


def build_question_table(sections: list[Section]) -> dict[str, QuestionDefinition]:
    """
    Flatten sections into ``{question_id: QuestionDefinition}``.

    Raises:
        ValueError: If a question id is defined twice, or a plain question
            sits in a section without an option scale.
    """
    table: dict[str, QuestionDefinition] = {}
    for section in sections:
        for question_id, question in section.questions.items():
            if question_id in table:
                raise ValueError(f"Duplicate question id {question_id!r} in section {section.key}")

            if isinstance(question, SelfContainedQuestion):
                options = question.options
            elif question.uses_section_options:
                if not section.options:
                    raise ValueError(f"Section {section.key} has no options for question {question_id!r}")
                options = section.options
            else:
                # Free-form answer
                options = ()

            table[question_id] = QuestionDefinition(
                question_id=question_id,
                section=section.key,
                text=question.text,
                options=tuple(options),
            )
    return table


SURVEY_SECTIONS: list[Section] = [
    Section(
        key="A",
        title="Water Fountain Usage Patterns",
        questions={
            "1": PlainQuestion("How often do you use the water fountains on campus?"),
            "2": PlainQuestion(
                "How confident are you about the quality of water provided by campus fountains?"
            ),
        },
        options=LIKERT_FREQUENCY,
    ),
    Section(
        key="B",
        title="Water Quality Issues Experience",
        questions={
            "3": PlainQuestion("How often have you experienced unusual taste in fountain water?"),
            "4": PlainQuestion("How often have you experienced unusual odor in fountain water?"),
            "5": PlainQuestion(
                "How often have you noticed unusual appearance (cloudiness, discoloration) in fountain water?"
            ),
            "6": PlainQuestion("How often have you experienced low water pressure from the fountains?"),
            "7": PlainQuestion(
                "How often have you found water fountains to be out of service/not working?"
            ),
        },
        options=LIKERT_FREQUENCY,
    ),
    Section(
        key="C",
        title="Problem Reporting and Response",
        questions={
            "11": SelfContainedQuestion(
                "Have you ever avoided using a water fountain due to quality concerns?", YES_NO
            ),
            "12": SelfContainedQuestion(
                "Have you ever reported a problem with a water fountain to campus facilities/maintenance?",
                YES_NO,
            ),
            "13": SelfContainedQuestion(
                "If you reported a problem, how satisfied were you with how quickly it was resolved?",
                (
                    "Very dissatisfied",
                    "Dissatisfied",
                    "Neutral",
                    "Satisfied",
                    "Very satisfied",
                    "N/A (Never reported)",
                ),
            ),
        },
    ),
    Section(
        key="D",
        title="User Preferences and Needs",
        questions={
            "14": PlainQuestion(
                "How important is it for you to know when a water fountain was last serviced/cleaned?"
            ),
            "15": PlainQuestion(
                "How important is it for you to have more water fountains available on campus?"
            ),
            "16": PlainQuestion(
                "How important is it for you to have water bottle filling stations "
                "in addition to traditional fountains?"
            ),
        },
        options=IMPORTANCE,
    ),
    Section(
        key="E",
        title="Health and Usage Impact",
        questions={
            "17": PlainQuestion("I trust the campus water fountains to provide safe drinking water"),
            "18": PlainQuestion(
                "I would use water fountains more often if I was confident about water quality"
            ),
            "19": PlainQuestion("Water fountain quality affects my daily hydration habits on campus"),
            "20": PlainQuestion(
                "I believe improving water fountains would benefit the campus community"
            ),
        },
        options=AGREEMENT,
    ),
    Section(
        key="F",
        title="Alternative Water Sources",
        questions={
            "21": PlainQuestion(
                "How often do you bring your own water bottle instead of using campus fountains?"
            ),
            "22": PlainQuestion(
                "How often do you purchase bottled water instead of using campus fountains?"
            ),
        },
        options=LIKERT_FREQUENCY,
    ),
    Section(
        key="Demographics",
        title="Demographics (Optional)",
        questions={
            "23": SelfContainedQuestion(
                "What is your role on campus?",
                ("Student", "Graduate student", "Faculty", "Staff", "Visitor"),
            ),
            "24": SelfContainedQuestion(
                "How long have you been on SMU campus?",
                ("Less than 1 year", "1-2 years", "3-4 years", "5+ years"),
            ),
        },
    ),
    Section(
        key="Comments",
        title="School",
        questions={
            "25": SelfContainedQuestion(
                "Which school are you part of?",
                ("SEAIT", "SAB", "SHANS", "STEH", "SHS"),
            ),
        },
    ),
]

QUESTIONS: dict[str, QuestionDefinition] = build_question_table(SURVEY_SECTIONS)
