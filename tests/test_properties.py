"""Property-based tests for equation numbering using Hypothesis.

These tests verify invariants that hold for any sequence of math blocks:
1. Display equations are numbered 1..N in call order
2. A label in the Nth display block maps to N
3. Inline math never touches the registry
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from mdlatex import BlockConverter
from mdlatex.blocks import Block, BlockTag
from mdlatex.context import new_context

display_tags = st.sampled_from(
    [BlockTag.MATH_B, BlockTag.MATH_C, BlockTag.MATH_ALIGN, BlockTag.MATH_EQARRAY]
)

FENCES = {
    BlockTag.MATH_A: ("$", "$"),
    BlockTag.MATH_B: ("$$", "$$"),
    BlockTag.MATH_C: ("\\[", "\\]"),
    BlockTag.MATH_ALIGN: ("\\begin{align}", "\\end{align}"),
    BlockTag.MATH_EQARRAY: ("\\begin{eqnarray}", "\\end{eqnarray}"),
}

# (tag, labelled) for each block of a document
documents = st.lists(
    st.tuples(st.one_of(display_tags, st.just(BlockTag.MATH_A)), st.booleans()),
    max_size=30,
)


def math_block(tag: BlockTag, body: str) -> Block:
    head, tail = FENCES[tag]
    return Block.from_text(tag, head + body + tail)


class TestNumberingProperties:
    """Equation numbering is a pure function of block order."""

    @given(doc=documents)
    @settings(max_examples=100)
    def test_numbers_follow_call_order(self, doc: list[tuple[BlockTag, bool]]) -> None:
        conv = BlockConverter()
        ctx = new_context()
        reg = ctx.session.equations

        expected_counter = 0
        expected_labels: dict[str, int] = {}
        for i, (tag, labelled) in enumerate(doc):
            body = f"x_{{{i}}}" + (f" \\label{{eq{i}}}" if labelled else "")
            out = conv.convert(math_block(tag, body), ctx)

            if tag is BlockTag.MATH_A:
                assert "<a id=" not in out
            else:
                expected_counter += 1
                if labelled:
                    expected_labels[f"eq{i}"] = expected_counter
            assert reg.counter == expected_counter

        assert reg.labels == expected_labels

    @given(n=st.integers(min_value=0, max_value=20))
    @settings(max_examples=25)
    def test_unlabelled_blocks_leave_no_entries(self, n: int) -> None:
        conv = BlockConverter()
        ctx = new_context()
        for _ in range(n):
            conv.convert(math_block(BlockTag.MATH_B, "y"), ctx)
        assert ctx.session.equations.counter == n
        assert len(ctx.session.equations) == 0
