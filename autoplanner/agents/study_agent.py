"""
Study Agent for Autoplanner
Turns course notes into a week-long study plan with flashcards and practice
questions.

Notes are markdown-ish text: `## Heading` lines are topics and `- item` lines
are concepts. Links, empty sources and notes without either fall back to
the bundled syllabus. Files are read only from the configured notes directory.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import csv
import io
import math

from .base_agent import BaseAgent
from .intent_parser import STUDY_AGENT
from .mock_data import MOCK_STUDY_NOTES


DEFAULT_SUBJECT = "General Study"


@dataclass
class DailyStudyTask:
    day: int
    date: str
    iso_date: str
    topics: List[str]
    objectives: List[str]
    duration: str
    work_hours: str


@dataclass
class Flashcard:
    question: str
    answer: str


@dataclass
class PracticeQuestion:
    q: str
    a: str
    difficulty: str  # 'easy', 'medium', 'hard'


@dataclass
class StudyAgentOutput:
    subject: str
    study_schedule: List[DailyStudyTask] = field(default_factory=list)
    flashcards: List[Flashcard] = field(default_factory=list)
    flashcards_csv: str = ""
    practice_questions: List[PracticeQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


PRACTICE_QUESTIONS = [
    PracticeQuestion(
        q="Explain the bias-variance tradeoff and how it relates to model complexity.",
        a=("The bias-variance tradeoff describes the balance between underfitting (high bias) "
           "and overfitting (high variance). As model complexity increases, bias decreases but "
           "variance increases. The goal is to find the optimal complexity that minimizes total error."),
        difficulty="medium",
    ),
    PracticeQuestion(
        q="Describe the backpropagation algorithm and its role in training neural networks.",
        a=("Backpropagation computes gradients of the loss function with respect to network "
           "weights by applying the chain rule backwards through the network. It enables "
           "efficient gradient descent optimization for deep networks."),
        difficulty="hard",
    ),
    PracticeQuestion(
        q="What is the kernel trick in SVMs and why is it useful?",
        a=("The kernel trick allows SVMs to operate in high-dimensional feature spaces without "
           "explicitly computing coordinates in that space. It makes non-linear classification "
           "computationally feasible by computing inner products using kernel functions."),
        difficulty="hard",
    ),
    PracticeQuestion(
        q="Compare and contrast Random Forests and Gradient Boosting.",
        a=("Random Forests build multiple trees in parallel with bagging and random feature "
           "selection, averaging predictions. Gradient Boosting builds trees sequentially, each "
           "correcting errors of previous trees. RF reduces variance; GB reduces bias."),
        difficulty="medium",
    ),
    PracticeQuestion(
        q="Explain when to use PCA and what it accomplishes.",
        a=("PCA is used for dimensionality reduction by finding principal components that "
           "capture maximum variance. It is useful for visualization, noise reduction, and "
           "speeding up learning algorithms while preserving most information."),
        difficulty="easy",
    ),
]


class StudyAgent(BaseAgent):
    """
    Study plan generator.

    Produces a fixed-length schedule (topics spread evenly over the days),
    up to MAX_FLASHCARDS template flashcards with a CSV export, and the static
    practice question bank.
    """

    AGENT_NAME = STUDY_AGENT

    STUDY_DAYS = 7
    MAX_FLASHCARDS = 20
    SESSION_DURATION = "90 minutes"

    FLASHCARD_TEMPLATES = [
        ("What is", "is a"),
        ("Define", "refers to"),
        ("Explain", "involves"),
        ("How does", "works by"),
    ]

    def __init__(self, config=None, notes_dir: Optional[Path] = None):
        """
        Initialize the study agent.

        Args:
            config: Config instance (may be None)
            notes_dir: Directory notes files may be read from; defaults to the
                `notes_dir` setting. Without one, sources are never read as files.
        """
        super().__init__(config, "study")
        if notes_dir is None:
            notes_dir = self.get_config_value("notes_dir", section="settings")
        self.notes_dir = Path(notes_dir).expanduser().resolve() if notes_dir else None

    def plan_step(self, intent) -> str:
        subject = intent.params.subject or "specified topic"
        return (f"{self.AGENT_NAME}: Create 7-day study plan for {subject}, "
                "generate flashcards and practice questions.")

    def execute(self, notes_source: Optional[str], subject: Optional[str] = None,
                work_hours: str = "09:00-17:00",
                today: Optional[date] = None) -> StudyAgentOutput:
        """
        Build the study plan.

        Args:
            notes_source: Notes text, a file under the notes directory, or a link;
                links and empty values use the bundled syllabus
            subject: Subject name (defaults to "General Study")
            work_hours: Working-hours window echoed on each day
            today: First day of the schedule (defaults to today)

        Returns:
            StudyAgentOutput
        """
        if today is None:
            today = date.today()

        topics, concepts = self.parse_notes(self.load_notes(notes_source))
        if not topics and not concepts:
            topics, concepts = self.parse_notes(MOCK_STUDY_NOTES)

        schedule = self.generate_schedule(topics, work_hours, today)
        flashcards = self.generate_flashcards(concepts)
        practice_questions = list(PRACTICE_QUESTIONS)

        self.log_action("create_study_plan", {
            "subject": subject or DEFAULT_SUBJECT,
            "topics": len(topics),
            "concepts": len(concepts),
            "flashcards": len(flashcards),
        })

        return StudyAgentOutput(
            subject=subject or DEFAULT_SUBJECT,
            study_schedule=schedule,
            flashcards=flashcards,
            flashcards_csv=self.generate_csv(flashcards),
            practice_questions=practice_questions,
        )

    def load_notes(self, notes_source: Optional[str]) -> str:
        """
        Resolve a notes source to text.

        A single-line source names a file only when it resolves inside the
        notes directory; any other source is used as notes text.
        """
        if notes_source is None or not notes_source.strip():
            return MOCK_STUDY_NOTES

        source = notes_source.strip()
        if source.startswith(("http://", "https://")):
            # Remote documents are not fetched
            self.logger.info(f"Notes link {source} not fetched, using bundled syllabus")
            return MOCK_STUDY_NOTES

        if self.notes_dir is not None and "\n" not in source:
            text = self._read_notes_file(source)
            if text is not None:
                return text

        return notes_source

    def _read_notes_file(self, source: str) -> Optional[str]:
        """Contents of `source` when it is a file under the notes directory"""
        try:
            path = (self.notes_dir / Path(source).expanduser()).resolve()
            if self.notes_dir not in path.parents or not path.is_file():
                return None
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            # Not a usable path (e.g. name too long); treat as text
            self.logger.debug(f"Notes source is not a readable file: {e}")
            return None

    @staticmethod
    def parse_notes(notes: str) -> Tuple[List[str], List[str]]:
        """Split notes into (topics, concepts)"""
        topics = []
        concepts = []
        for line in notes.split("\n"):
            if line.startswith("##") and not line.startswith("###"):
                topics.append(line[2:].strip())
            elif line.startswith("- "):
                concepts.append(line[2:].strip())
        return topics, concepts

    def generate_schedule(self, topics: List[str], work_hours: str,
                          today: date) -> List[DailyStudyTask]:
        days = self.STUDY_DAYS
        per_day = math.ceil(len(topics) / days)
        schedule = []

        for offset in range(days):
            day = today + timedelta(days=offset)
            day_topics = topics[offset * per_day:(offset + 1) * per_day]
            schedule.append(DailyStudyTask(
                day=offset + 1,
                date=f"{day.strftime('%A, %b')} {day.day}",
                iso_date=day.isoformat(),
                topics=day_topics,
                objectives=[
                    f"Review and understand {', '.join(day_topics)}",
                    "Complete practice problems for these topics",
                    "Review flashcards 2-3 times",
                ],
                duration=self.SESSION_DURATION,
                work_hours=work_hours,
            ))

        return schedule

    def generate_flashcards(self, concepts: List[str]) -> List[Flashcard]:
        cards = []
        for i, concept in enumerate(concepts[:self.MAX_FLASHCARDS]):
            question, answer = self.FLASHCARD_TEMPLATES[i % len(self.FLASHCARD_TEMPLATES)]
            cards.append(Flashcard(
                question=f"{question} {concept}?",
                answer=f"{concept} {answer} [detailed explanation based on course materials]",
            ))
        return cards

    @staticmethod
    def generate_csv(flashcards: List[Flashcard]) -> str:
        """Render flashcards as 'Question,Answer' CSV with every field quoted"""
        buffer = io.StringIO()
        buffer.write("Question,Answer\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for card in flashcards:
            writer.writerow([card.question, card.answer])
        return buffer.getvalue()
