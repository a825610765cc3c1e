"""Tests for CaptureScriptGenerator."""

from webreplay.recording import CaptureConfig, CaptureScriptGenerator


class TestCaptureScriptGenerator:
    """Tests for the generated listener script."""

    def test_default_listeners(self):
        script = CaptureScriptGenerator().generate()

        assert '["click", "input", "change", "submit"]' in script
        assert "document.addEventListener(name, handlers[name], true)" in script

    def test_buffer_name(self):
        generator = CaptureScriptGenerator(CaptureConfig(buffer_name="__rec"))

        assert 'const BUFFER = "__rec"' in generator.generate()
        assert 'window["__rec"]' in generator.drain_expression()

    def test_passwords_masked(self):
        script = CaptureScriptGenerator().generate()
        assert 'const MASKED = ["password"]' in script

    def test_typed_kinds(self):
        """Test element types that become interaction kinds."""
        script = CaptureScriptGenerator().generate()
        assert '["text", "search", "checkbox", "range", "select-one"]' in script

    def test_truncation_lengths(self):
        script = CaptureScriptGenerator(CaptureConfig(max_text_length=7, max_value_length=9)).generate()

        assert "truncate(element.value, 9)" in script
        assert "truncate(element.textContent.trim(), 7)" in script

    def test_selector_builder_order(self):
        script = CaptureScriptGenerator().generate()

        id_pos = script.index('return "#" + element.id')
        name_pos = script.index("[name=")
        nth_pos = script.index(":nth-of-type(")
        assert id_pos < name_pos < nth_pos

    def test_drain_empties_buffer(self):
        expression = CaptureScriptGenerator().drain_expression()
        assert expression.startswith("() =>")
        assert "= [];" in expression
