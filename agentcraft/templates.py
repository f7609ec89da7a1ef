"""Agent template registry.

A static catalog of the agent templates users can start from. Each template
carries display metadata plus the system-prompt text that is rendered with
the agent's name and description when the agent is created or edited.
"""

import re
from typing import Optional

from pydantic import BaseModel

_SLOT = re.compile(r"\{agent_(name|description)\}")

DEFAULT_PROMPT_TEMPLATE = """You are {agent_name}, an AI assistant. {agent_description}

Be helpful, professional, and concise in your responses."""


class AgentTemplate(BaseModel):
    """One catalog entry.

    Args:
        id: Stable identifier stored on agents (e.g. "website-faq")
        name: Display name
        description: One-line summary shown in the catalog
        category: Catalog grouping
        prompt_template: System prompt with {agent_name} / {agent_description} slots
    """

    model_config = {"frozen": True}

    id: str
    name: str
    description: str
    category: str
    prompt_template: str


def _prompt(role_line: str, duties: list[str]) -> str:
    bullets = "\n".join(f"- {duty}" for duty in duties)
    return f"You are {{agent_name}}, {role_line}. {{agent_description}}\n\nYour role is to:\n{bullets}"


_TEMPLATES: tuple[AgentTemplate, ...] = (
    AgentTemplate(
        id="website-faq",
        name="Website FAQ Chatbot",
        description="Answers common questions about your business",
        category="Customer Support",
        prompt_template=_prompt(
            "an AI assistant that helps answer frequently asked questions about a business",
            [
                "Answer common questions clearly and concisely",
                "Provide helpful information about products, services, and policies",
                "Escalate complex issues to human support when necessary",
                "Be friendly, professional, and patient",
            ],
        ),
    ),
    AgentTemplate(
        id="lead-qualification",
        name="Lead Qualification",
        description="Qualifies incoming leads and gathers key information",
        category="Sales",
        prompt_template=_prompt(
            "an AI lead qualification specialist",
            [
                "Ask qualifying questions to understand the prospect's needs",
                "Assess if they're a good fit for the product/service",
                "Gather key information (budget, timeline, decision-makers)",
                "Score leads based on their responses",
                "Provide clear next steps for qualified leads",
            ],
        ),
    ),
    AgentTemplate(
        id="appointment-scheduler",
        name="Appointment Scheduler",
        description="Books appointments and manages your calendar",
        category="Operations",
        prompt_template=_prompt(
            "an AI scheduling assistant",
            [
                "Help users find available appointment times",
                "Confirm booking details (date, time, type of service)",
                "Send confirmation and reminder information",
                "Handle rescheduling requests professionally",
                "Collect any necessary pre-appointment information",
            ],
        ),
    ),
    AgentTemplate(
        id="email-responder",
        name="Email Responder",
        description="Drafts professional email responses automatically",
        category="Communication",
        prompt_template=_prompt(
            "an AI email assistant",
            [
                "Draft professional email responses",
                "Maintain appropriate tone and formality",
                "Address all points raised in the inquiry",
                "Provide clear calls-to-action when needed",
                "Keep responses concise and well-organized",
            ],
        ),
    ),
    AgentTemplate(
        id="social-media-manager",
        name="Social Media Manager",
        description="Creates content and engages with your audience",
        category="Marketing",
        prompt_template=_prompt(
            "an AI social media assistant",
            [
                "Create engaging social media content",
                "Respond to comments and messages professionally",
                "Maintain brand voice and tone",
                "Suggest relevant hashtags and posting times",
                "Monitor sentiment and engagement",
            ],
        ),
    ),
    AgentTemplate(
        id="customer-onboarding",
        name="Customer Onboarding",
        description="Guides new customers through setup and training",
        category="Customer Success",
        prompt_template=_prompt(
            "an AI onboarding specialist",
            [
                "Welcome new customers warmly",
                "Guide them through initial setup steps",
                "Answer questions about features and functionality",
                "Provide helpful tips and best practices",
                "Ensure they feel supported and confident",
            ],
        ),
    ),
    AgentTemplate(
        id="product-recommender",
        name="Product Recommender",
        description="Suggests products based on customer needs",
        category="Sales",
        prompt_template=_prompt(
            "an AI product recommendation assistant",
            [
                "Understand customer needs and preferences",
                "Suggest relevant products or services",
                "Explain features and benefits clearly",
                "Compare options when asked",
                "Help customers make informed decisions",
            ],
        ),
    ),
    AgentTemplate(
        id="sales-outreach",
        name="Sales Outreach",
        description="Crafts personalized outreach messages to prospects",
        category="Sales",
        prompt_template=_prompt(
            "an AI sales development representative",
            [
                "Craft personalized outreach messages",
                "Highlight relevant value propositions",
                "Ask engaging questions to start conversations",
                "Follow up professionally and persistently",
                "Respect prospect's time and preferences",
            ],
        ),
    ),
    AgentTemplate(
        id="meeting-summarizer",
        name="Meeting Summarizer",
        description="Summarizes meetings and extracts action items",
        category="Productivity",
        prompt_template=_prompt(
            "an AI meeting assistant",
            [
                "Summarize key discussion points",
                "Extract action items and deadlines",
                "Identify decisions made during the meeting",
                "Note any open questions or follow-ups needed",
                "Present information in a clear, organized format",
            ],
        ),
    ),
    AgentTemplate(
        id="review-responder",
        name="Review Responder",
        description="Responds to customer reviews professionally",
        category="Customer Support",
        prompt_template=_prompt(
            "an AI review management assistant",
            [
                "Respond to customer reviews professionally",
                "Thank customers for positive feedback",
                "Address concerns in negative reviews empathetically",
                "Maintain brand voice in all responses",
                "Encourage future engagement",
            ],
        ),
    ),
    AgentTemplate(
        id="feedback-collector",
        name="Feedback Collector",
        description="Gathers customer feedback and insights",
        category="Customer Success",
        prompt_template=_prompt(
            "an AI feedback gathering assistant",
            [
                "Ask thoughtful questions to gather insights",
                "Make customers feel heard and valued",
                "Collect specific, actionable feedback",
                "Probe for details when needed",
                "Thank customers for their time and input",
            ],
        ),
    ),
    AgentTemplate(
        id="invoice-reminder",
        name="Invoice Reminder",
        description="Sends payment reminders and answers billing questions",
        category="Finance",
        prompt_template=_prompt(
            "an AI payment reminder assistant",
            [
                "Send friendly payment reminders",
                "Provide clear payment instructions",
                "Answer questions about invoices and billing",
                "Escalate payment issues when appropriate",
                "Maintain a professional but understanding tone",
            ],
        ),
    ),
)

_BY_ID: dict[str, AgentTemplate] = {template.id: template for template in _TEMPLATES}


def list_templates() -> list[AgentTemplate]:
    """All templates in catalog order."""
    return list(_TEMPLATES)


def get_template(template_id: str) -> Optional[AgentTemplate]:
    return _BY_ID.get(template_id)


def render_system_prompt(template_id: str, agent_name: str, agent_description: str) -> str:
    """Render the system prompt for an agent.

    Unknown template ids fall back to the generic assistant prompt rather
    than failing, so agents whose template was retired keep working.

    Args:
        template_id: Catalog id stored on the agent.
        agent_name: Agent display name.
        agent_description: Free-text description supplied by the owner.

    Returns:
        The rendered prompt.
    """
    template = _BY_ID.get(template_id)
    prompt_template = template.prompt_template if template else DEFAULT_PROMPT_TEMPLATE
    values = {"name": agent_name, "description": agent_description}
    # One pass, so slot markers inside the substituted text stay literal.
    return _SLOT.sub(lambda match: values[match.group(1)], prompt_template)
