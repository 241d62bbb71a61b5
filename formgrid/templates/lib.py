"""Built-in form templates.

Each template is a named list of field specifications. Building a template
always produces fresh nodes (new identities) laid out on the grid, so the
same template can be loaded any number of times.
"""

from dataclasses import dataclass
from typing import Any

from formgrid.layout import assign_rows
from formgrid.tree import FieldNode


@dataclass(frozen=True)
class FormTemplate:
    """A starting point for a new form.

    Attributes:
        id: Template identifier used on the command line.
        name: Display name, also used as the new form's name.
        description: One-line summary.
        fields: Keyword arguments for each FieldNode, in order.
    """

    id: str
    name: str
    description: str
    fields: tuple[dict[str, Any], ...]

    def build(self) -> list[FieldNode]:
        """Create fresh, laid-out nodes for this template."""
        return assign_rows([FieldNode(**spec) for spec in self.fields])


def _field(
    name: str,
    label: str,
    kind: str = "string",
    width: str = "full",
    required: bool = False,
    **config: Any,
) -> dict[str, Any]:
    return {
        "name": name,
        "label": label,
        "kind": kind,
        "width": width,
        "required": required,
        "config": config,
    }


TEMPLATES: dict[str, FormTemplate] = {
    template.id: template
    for template in (
        FormTemplate(
            id="login",
            name="Login Form",
            description="Simple login form with email and password",
            fields=(
                _field("email", "Email Address", required=True, format="email"),
                _field("password", "Password", required=True, format="password"),
            ),
        ),
        FormTemplate(
            id="signup",
            name="Signup Form",
            description="User registration form with essential fields",
            fields=(
                _field("firstName", "First Name", width="half", required=True),
                _field("lastName", "Last Name", width="half", required=True),
                _field("email", "Email Address", required=True, format="email"),
                _field("password", "Password", width="half", required=True, format="password"),
                _field(
                    "confirmPassword",
                    "Confirm Password",
                    width="half",
                    required=True,
                    format="password",
                ),
                _field(
                    "agreeToTerms",
                    "I agree to the Terms and Conditions",
                    kind="boolean",
                    required=True,
                ),
            ),
        ),
        FormTemplate(
            id="registration",
            name="Registration Form",
            description="Comprehensive registration with personal details",
            fields=(
                _field("fullName", "Full Name", required=True),
                _field("email", "Email Address", width="half", required=True, format="email"),
                _field("phone", "Phone Number", width="half"),
                _field("dateOfBirth", "Date of Birth", width="half", required=True, format="date"),
                _field(
                    "gender",
                    "Gender",
                    width="half",
                    enum=["Male", "Female", "Other", "Prefer not to say"],
                ),
                _field("address", "Address"),
                _field("city", "City", width="quarter"),
                _field("state", "State", width="quarter"),
                _field("zipCode", "ZIP Code", width="quarter"),
            ),
        ),
        FormTemplate(
            id="survey",
            name="Survey Form",
            description="Customer satisfaction survey template",
            fields=(
                _field("name", "Your Name", required=True),
                _field("email", "Email Address", required=True, format="email"),
                _field(
                    "overallSatisfaction",
                    "Overall Satisfaction",
                    kind="number",
                    required=True,
                    max=5,
                ),
                _field(
                    "serviceQuality",
                    "How would you rate our service quality?",
                    required=True,
                    enum=["Excellent", "Good", "Average", "Poor", "Very Poor"],
                ),
                _field(
                    "recommendToFriend",
                    "Would you recommend us to a friend?",
                    kind="boolean",
                    required=True,
                ),
                _field("feedback", "Additional Feedback"),
                _field("improvementSuggestions", "What can we improve?"),
            ),
        ),
    )
}


def list_templates() -> list[FormTemplate]:
    """All built-in templates, in display order."""
    return list(TEMPLATES.values())


def get_template(template_id: str) -> FormTemplate:
    """Look up a template by ID.

    Raises:
        KeyError: If no template has the ID; the message lists valid IDs.
    """
    try:
        return TEMPLATES[template_id]
    except KeyError:
        available = ", ".join(TEMPLATES)
        raise KeyError(f"Unknown template '{template_id}'. Available: {available}") from None


__all__ = [
    "FormTemplate",
    "TEMPLATES",
    "list_templates",
    "get_template",
]
