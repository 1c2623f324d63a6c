"""
Bundled demo data for the agents.

The agents do not talk to real mail or calendar services; they work on this
fixed inbox, calendar and syllabus. Dates are generated relative to the
supplied `now` so the demo always looks current.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional


@dataclass
class MockEmail:
    id: str
    sender: str
    subject: str
    snippet: str
    body: str
    date: datetime
    unread: bool
    priority: str  # 'urgent', 'normal', 'low'


@dataclass
class MockCalendarEvent:
    id: str
    title: str
    start: datetime
    end: datetime
    description: Optional[str] = None
    priority: str = "medium"  # 'high', 'medium', 'low'

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "description": self.description,
            "priority": self.priority,
        }


def generate_mock_emails(now: datetime) -> List[MockEmail]:
    def hours_ago(hours):
        return now - timedelta(hours=hours)

    return [
        MockEmail(
            id="email-1",
            sender="professor@university.edu",
            subject="URGENT: ML Midterm Reschedule to Monday",
            snippet="The midterm has been moved to Monday. Please confirm attendance.",
            body=("Dear students, due to unforeseen circumstances, the ML midterm has been "
                  "rescheduled to Monday at 10 AM. Please confirm your attendance."),
            date=hours_ago(2),
            unread=True,
            priority="urgent",
        ),
        MockEmail(
            id="email-2",
            sender="team-lead@company.com",
            subject="Sprint Review Meeting Tomorrow",
            snippet="Please prepare your updates for tomorrow's sprint review.",
            body=("Hi team, reminder about our sprint review meeting tomorrow at 2 PM. "
                  "Please have your updates ready."),
            date=hours_ago(5),
            unread=True,
            priority="normal",
        ),
        MockEmail(
            id="email-3",
            sender="recruiter@techcorp.com",
            subject="Interview Opportunity - Senior Developer",
            snippet="We have an exciting opportunity that matches your profile.",
            body=("Hello, we came across your profile and think you would be a great fit "
                  "for our Senior Developer position."),
            date=hours_ago(24),
            unread=True,
            priority="normal",
        ),
        MockEmail(
            id="email-4",
            sender="newsletter@techblog.com",
            subject="Weekly Tech Digest",
            snippet="Top 10 articles this week on AI and Machine Learning",
            body=("Here are the most popular articles from this week covering AI, ML, "
                  "and software development trends."),
            date=hours_ago(12),
            unread=True,
            priority="low",
        ),
        MockEmail(
            id="email-5",
            sender="client@startup.io",
            subject="Project Deadline Extension Request",
            snippet="Can we discuss extending the project deadline?",
            body=("Hi, we are facing some challenges with requirements and would like to "
                  "discuss a possible deadline extension."),
            date=hours_ago(3),
            unread=True,
            priority="urgent",
        ),
        MockEmail(
            id="email-6",
            sender="mentor@university.edu",
            subject="Research Paper Review",
            snippet="I've reviewed your draft and have some feedback.",
            body=("Great work on the draft! I have a few suggestions for improvement that "
                  "we should discuss."),
            date=hours_ago(8),
            unread=True,
            priority="normal",
        ),
    ]


def generate_mock_calendar_events(now: datetime) -> List[MockCalendarEvent]:
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    def at(hours):
        return day_start + timedelta(hours=hours)

    return [
        MockCalendarEvent("event-1", "Team Standup", at(10), at(10.5),
                          "Daily standup meeting", "medium"),
        MockCalendarEvent("event-2", "Coffee Chat with Marketing", at(11), at(12),
                          "Casual discussion about Q4 campaigns", "low"),
        MockCalendarEvent("event-3", "Sprint Planning", at(14), at(16),
                          "Plan next sprint tasks", "high"),
        MockCalendarEvent("event-4", "Optional: Team Building Activity", at(16), at(17),
                          "Voluntary team activity", "low"),
        MockCalendarEvent("event-5", "One-on-One with Manager", at(24 + 15), at(24 + 16),
                          "Monthly check-in", "high"),
        MockCalendarEvent("event-6", "Lunch with Sales Team", at(24 + 12), at(24 + 13),
                          "Informal lunch meeting", "low"),
    ]


MOCK_STUDY_NOTES = """
# Machine Learning Midterm - Study Guide

## Week 1-2: Fundamentals
- Supervised vs Unsupervised Learning
- Linear Regression: concepts, cost function, gradient descent
- Logistic Regression: sigmoid function, decision boundary
- Overfitting and Regularization (L1, L2)

## Week 3-4: Neural Networks
- Perceptrons and activation functions
- Backpropagation algorithm
- Deep learning architectures
- Convolutional Neural Networks (CNNs)

## Week 5: Support Vector Machines
- Linear SVM
- Kernel trick
- Soft margin classification

## Week 6: Ensemble Methods
- Decision Trees
- Random Forests
- Gradient Boosting
- XGBoost

## Week 7: Unsupervised Learning
- K-Means Clustering
- Hierarchical Clustering
- Principal Component Analysis (PCA)
- t-SNE for visualization

## Important Concepts
- Bias-Variance Tradeoff
- Cross-validation techniques
- Feature engineering
- Model evaluation metrics (precision, recall, F1-score, ROC-AUC)
"""
