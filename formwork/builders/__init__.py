"""
Formwork Builders — the fluent surface.

  Form.section() → SectionBuilder → group()/fieldset() → field() → end_*()
  Form.submit_controls() → SubmitControlsBuilder → button()/field()
"""

from formwork.builders.field import FieldBuilder, create_component_builder
from formwork.builders.section import FieldsetBuilder, GroupBuilder, SectionBuilder
from formwork.builders.submit import SubmitControlsBuilder

__all__ = [
    "FieldBuilder",
    "FieldsetBuilder",
    "GroupBuilder",
    "SectionBuilder",
    "SubmitControlsBuilder",
    "create_component_builder",
]
