"""Unit tests for form templates."""

import pytest

from formgrid.compiler import compile_form
from formgrid.templates import get_template, list_templates
from formgrid.tree import collect_ids
from formgrid.validation import validate_tree


class TestTemplates:
    """Tests for the built-in templates."""

    @pytest.mark.unit
    def test_available_templates(self):
        """The four built-in templates are listed in order."""
        assert [t.id for t in list_templates()] == ["login", "signup", "registration", "survey"]

    @pytest.mark.unit
    def test_unknown_template(self):
        """Unknown IDs raise KeyError naming the valid ones."""
        with pytest.raises(KeyError, match="login"):
            get_template("nope")

    @pytest.mark.unit
    @pytest.mark.parametrize("template", list_templates(), ids=lambda t: t.id)
    def test_templates_are_valid(self, template):
        """Every template builds a valid, warning-free form."""
        nodes = template.build()
        assert validate_tree(nodes) == []
        assert not compile_form(nodes).has_warnings

    @pytest.mark.unit
    def test_build_gives_fresh_identities(self):
        """Loading a template twice never shares identities."""
        template = get_template("login")
        assert not collect_ids(template.build()) & collect_ids(template.build())

    @pytest.mark.unit
    def test_registration_layout(self):
        """Registration packs its narrow fields into shared rows."""
        nodes = get_template("registration").build()
        rows = {node.name: node.row for node in nodes}
        assert rows["email"] == rows["phone"] == 1
        assert rows["dateOfBirth"] == rows["gender"] == 2
        assert rows["city"] == rows["state"] == rows["zipCode"] == 4

    @pytest.mark.unit
    def test_login_documents(self):
        """Login compiles to two required formatted strings."""
        compiled = compile_form(get_template("login").build())
        assert compiled.schema["required"] == ["email", "password"]
        assert compiled.schema["properties"]["password"]["format"] == "password"
