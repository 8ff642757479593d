"""
Formwork — declarative form composition.

Builders emit events, the kernel folds them into an ordered tree,
and a render session turns that tree into markup through a
two-tier template override scheme and a component manifest.
"""

from formwork.kernel.form import Form

__all__ = ["Form"]
