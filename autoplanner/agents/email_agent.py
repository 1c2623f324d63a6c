"""
Email Agent for Autoplanner
Triages the inbox and drafts replies for the messages that need one.

The inbox is the bundled demo inbox; no mail is fetched or delivered. Sending
a draft is a separate, user-confirmed step outside the agent.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base_agent import BaseAgent
from .intent_parser import EMAIL_AGENT
from .mock_data import MockEmail, generate_mock_emails


@dataclass
class EmailSummary:
    id: str
    sender: str
    subject: str
    snippet: str
    priority: str
    date: str


@dataclass
class EmailReply:
    to: str
    subject: str
    draft_snippet: str
    full_draft: str
    priority: str = "normal"


@dataclass
class EmailAgentOutput:
    replies_sent_count: int
    drafts: List[EmailReply] = field(default_factory=list)
    summaries: List[EmailSummary] = field(default_factory=list)
    top_urgent: List[EmailSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EmailAgent(BaseAgent):
    """
    Inbox triage agent.

    Reply candidates are every urgent message plus the first two normal ones.
    Each reply body comes from a fixed template keyed by the source message's
    priority.
    """

    AGENT_NAME = EMAIL_AGENT

    NORMAL_REPLY_LIMIT = 2
    TOP_URGENT_LIMIT = 5
    SNIPPET_LENGTH = 100

    REPLY_TEMPLATES = {
        "urgent": ('Thank you for your email regarding "{subject}". I have received this and '
                   'will respond with full details shortly. This is acknowledged as high priority.'),
        "normal": ('Thank you for reaching out. I appreciate your email about "{subject}" and '
                   "will review it carefully. I'll get back to you within 24-48 hours."),
        "low": ("Thank you for your email. I've noted the information regarding \"{subject}\" "
                "and will review it when time permits."),
    }

    def __init__(self, config=None):
        super().__init__(config, "email")

    def plan_step(self, intent) -> str:
        send = " and send" if intent.params.auto_send else ""
        return f"{self.AGENT_NAME}: Triage inbox, draft replies for urgent emails{send}."

    def execute(self, oauth_account_ref: Optional[str], auto_send: bool,
                now: Optional[datetime] = None) -> EmailAgentOutput:
        """
        Triage the inbox and draft replies.

        Args:
            oauth_account_ref: Connected account the inbox belongs to; the demo
                inbox does not depend on it
            auto_send: When True the drafts count as sent
            now: Reference time for the demo inbox (defaults to utcnow)

        Returns:
            EmailAgentOutput
        """
        if now is None:
            now = datetime.now(timezone.utc)

        inbox = generate_mock_emails(now)
        urgent = [e for e in inbox if e.priority == "urgent"]
        normal = [e for e in inbox if e.priority == "normal"]
        to_reply = urgent + normal[:self.NORMAL_REPLY_LIMIT]

        drafts = [self._generate_reply(email) for email in to_reply]
        summaries = [self._summarize(email) for email in inbox]
        top_urgent = [s for s in summaries if s.priority == "urgent"][:self.TOP_URGENT_LIMIT]

        self.log_action("triage_and_draft", {
            "account": oauth_account_ref,
            "inbox_size": len(inbox),
            "drafts": len(drafts),
            "auto_send": auto_send,
        })

        return EmailAgentOutput(
            replies_sent_count=len(drafts) if auto_send else 0,
            drafts=drafts,
            summaries=summaries,
            top_urgent=top_urgent,
        )

    def _generate_reply(self, email: MockEmail) -> EmailReply:
        template = self.REPLY_TEMPLATES.get(email.priority, self.REPLY_TEMPLATES["normal"])
        body = template.format(subject=email.subject)
        return EmailReply(
            to=email.sender,
            subject=f"Re: {email.subject}",
            draft_snippet=body[:self.SNIPPET_LENGTH] + "...",
            full_draft=body,
            priority=email.priority,
        )

    @staticmethod
    def _summarize(email: MockEmail) -> EmailSummary:
        return EmailSummary(
            id=email.id,
            sender=email.sender,
            subject=email.subject,
            snippet=email.snippet,
            priority=email.priority,
            date=email.date.isoformat(),
        )
