"""
Unit tests for the StudyAgent.
Tests notes loading, schedule layout, flashcards and CSV export.
"""

import csv
import io
import pytest
from datetime import date
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.agents.intent_parser import IntentParser
from autoplanner.agents.mock_data import MOCK_STUDY_NOTES
from autoplanner.agents.study_agent import DEFAULT_SUBJECT, Flashcard, StudyAgent
from autoplanner.core import Config


MONDAY = date(2025, 1, 6)

SMALL_NOTES = """# Algebra
## Vectors
- Dot product
- Cross product
### Not a topic
## Matrices
- Determinant
"""


@pytest.fixture
def agent():
    return StudyAgent()


class TestLoadNotes:
    """Tests for load_notes()."""

    @pytest.mark.parametrize("source", [None, "", "   ", "https://docs.example.com/notes", "http://x"])
    def test_falls_back_to_bundled_syllabus(self, agent, source):
        assert agent.load_notes(source) == MOCK_STUDY_NOTES

    def test_reads_file_in_notes_dir(self, tmp_path):
        notes_file = tmp_path / "notes.md"
        notes_file.write_text(SMALL_NOTES, encoding="utf-8")
        agent = StudyAgent(notes_dir=tmp_path)

        assert agent.load_notes("notes.md") == SMALL_NOTES
        assert agent.load_notes(str(notes_file)) == SMALL_NOTES

    def test_notes_dir_from_settings(self, tmp_path):
        (tmp_path / "notes.md").write_text(SMALL_NOTES, encoding="utf-8")
        config = Config(tmp_path / "config")
        config.set("notes_dir", str(tmp_path))

        assert StudyAgent(config).load_notes("notes.md") == SMALL_NOTES

    def test_file_outside_notes_dir_not_read(self, tmp_path):
        notes_dir = tmp_path / "notes"
        notes_dir.mkdir()
        secret = tmp_path / "secret.md"
        secret.write_text("## DB_PASSWORD=hunter2\n", encoding="utf-8")
        agent = StudyAgent(notes_dir=notes_dir)

        assert agent.load_notes(str(secret)) == str(secret)
        assert agent.load_notes("../secret.md") == "../secret.md"

    def test_without_notes_dir_path_is_text(self, agent, tmp_path):
        """With no notes directory configured, no source is ever read from disk."""
        secret = tmp_path / "secret.md"
        secret.write_text("## DB_PASSWORD=hunter2\n- API_KEY=sk-live-123\n", encoding="utf-8")

        assert agent.load_notes(str(secret)) == str(secret)

        output = agent.execute(str(secret), today=MONDAY)
        assert output.study_schedule[0].topics == ["Week 1-2: Fundamentals"]
        assert all("hunter2" not in card.answer for card in output.flashcards)

    def test_raw_text_is_used_as_is(self, agent):
        assert agent.load_notes(SMALL_NOTES) == SMALL_NOTES

    def test_missing_file_is_treated_as_text(self, tmp_path):
        agent = StudyAgent(notes_dir=tmp_path)

        assert agent.load_notes("missing.md") == "missing.md"


class TestParseNotes:
    """Tests for parse_notes()."""

    def test_topics_and_concepts(self):
        topics, concepts = StudyAgent.parse_notes(SMALL_NOTES)

        assert topics == ["Vectors", "Matrices"]
        assert concepts == ["Dot product", "Cross product", "Determinant"]

    def test_bundled_syllabus(self):
        topics, concepts = StudyAgent.parse_notes(MOCK_STUDY_NOTES)

        assert len(topics) == 6
        assert topics[0] == "Week 1-2: Fundamentals"
        assert len(concepts) == 23


class TestExecute:
    """Tests for execute()."""

    def test_default_run(self, agent):
        output = agent.execute(None, today=MONDAY)

        assert output.subject == DEFAULT_SUBJECT
        assert len(output.study_schedule) == 7
        assert len(output.flashcards) == 20
        assert len(output.practice_questions) == 5

    def test_schedule_days(self, agent):
        schedule = agent.execute(None, subject="ml", work_hours="08:00-12:00", today=MONDAY).study_schedule

        first, last = schedule[0], schedule[-1]

        assert first.day == 1
        assert first.date == "Monday, Jan 6"
        assert first.iso_date == "2025-01-06"
        assert first.topics == ["Week 1-2: Fundamentals"]
        assert first.objectives[0] == "Review and understand Week 1-2: Fundamentals"
        assert first.duration == "90 minutes"
        assert first.work_hours == "08:00-12:00"
        assert last.day == 7
        assert last.date == "Sunday, Jan 12"
        assert last.topics == []

    def test_topics_spread_over_seven_days(self, agent):
        notes = "\n".join(f"## Topic {i}" for i in range(10))

        schedule = agent.execute(notes, today=MONDAY).study_schedule

        assert [len(day.topics) for day in schedule] == [2, 2, 2, 2, 2, 0, 0]

    def test_notes_without_structure_use_syllabus(self, agent):
        output = agent.execute("just some words", today=MONDAY)

        assert len(output.flashcards) == 20

    def test_flashcards_from_own_notes(self, agent):
        output = agent.execute(SMALL_NOTES, subject="algebra", today=MONDAY)

        assert output.subject == "algebra"
        assert [c.question for c in output.flashcards] == [
            "What is Dot product?", "Define Cross product?", "Explain Determinant?",
        ]

    def test_plan_step(self, agent):
        parser = IntentParser()

        assert agent.plan_step(parser.parse("Study for my ML midterm")) == (
            "StudyAgent: Create 7-day study plan for ml, generate flashcards and practice questions."
        )
        assert "specified topic" in agent.plan_step(parser.parse("Help me study"))


class TestCsv:
    """Tests for generate_csv()."""

    def test_header_and_quoting(self):
        text = StudyAgent.generate_csv([Flashcard("Q1?", "A1")])

        assert text == 'Question,Answer\n"Q1?","A1"\n'

    def test_embedded_quotes_and_commas_survive_parsing(self):
        cards = [Flashcard('What is "bias", really?', "A, with commas"), Flashcard("Q2", "A2")]

        rows = list(csv.reader(io.StringIO(StudyAgent.generate_csv(cards))))

        assert rows[0] == ["Question", "Answer"]
        assert rows[1] == ['What is "bias", really?', "A, with commas"]
        assert len(rows) == 3

    def test_empty(self):
        assert StudyAgent.generate_csv([]) == "Question,Answer\n"
