import pytest

from promptpack.compression.summary import (
    CommentKind,
    classify_comment,
    collect_phrases,
    definition_names,
    extract_docstring_summary,
    extract_print_intent,
    is_print_statement,
    summarize_body,
    summarize_cell,
)


class TestPrintIntent:
    @pytest.mark.parametrize(
        "call, intent",
        [
            ('print("Loading data")', "loading"),
            ("print(f'Saved model to {path}')", "saving"),
            ('print("Epoch 3 finished")', "training progress"),
            ('print("Building vocab")', "building/generating"),
            ('print("All done")', "completion"),
            ('print("hello")', None),
            ("print(x)", None),
        ],
    )
    def test_extract_print_intent(self, call, intent):
        assert extract_print_intent(call) == intent

    def test_is_print_statement(self):
        assert is_print_statement("print('x')")
        assert is_print_statement("    print (x)")
        assert not is_print_statement("pprint(x)")


def test_collect_phrases_in_declaration_order():
    text = "plt.plot(x)\nsd = torch.load(p)\nprint('Loading weights')"
    assert collect_phrases(text) == [
        "loads checkpoint/state_dict",
        "plots figures",
        "loading",
    ]


def test_collect_phrases_deduplicates():
    assert collect_phrases("torch.load(a)\nmodel.load_state_dict(b)") == [
        "loads checkpoint/state_dict"
    ]


class TestSummarizeBody:
    def test_elided_without_phrases(self):
        assert summarize_body(["    x = 1"]) == ["summary: implementation elided"]

    def test_nothing_when_docstring_and_no_phrases(self):
        assert summarize_body(["    x = 1"], has_docstring=True) == []

    def test_chunks_three_per_line(self):
        body = [
            "    sd = torch.load(p)",
            "    torch.save(sd, q)",
            "    df = pd.read_csv(f)",
            "    ids = tokenizer.encode(t)",
            "    random.shuffle(ids)",
        ]
        assert summarize_body(body) == [
            "summary: loads checkpoint/state_dict, writes artifacts/checkpoints, reads data files",
            "summary: tokenizes/encodes text, applies augmentation/sampling",
        ]

    def test_line_limit(self):
        body = [
            "torch.load(a); torch.save(b); pd.read_csv(c); tokenizer.encode(d)",
            "shuffle(e); model.fit(f); accuracy; plt.plot(g); x.cuda()",
            "attention_mask; dataloader; logits.argmax()",
        ]
        lines = summarize_body(body, phrases_per_line=2, max_lines=3)
        assert len(lines) == 3
        assert all(line.startswith("summary: ") for line in lines)


class TestDocstring:
    def test_one_line(self):
        assert extract_docstring_summary(['    """Drop missing rows."""', "    pass"]) == (
            "Drop missing rows."
        )

    def test_opener_with_text(self):
        assert extract_docstring_summary(["    '''Train the model.", "    More.", "    '''"]) == (
            "Train the model."
        )

    def test_empty_opener(self):
        body = ['    """', "    Evaluate on the test split.", '    """']
        assert extract_docstring_summary(body) == "Evaluate on the test split."

    def test_empty_docstring(self):
        assert extract_docstring_summary(['    """', '    """']) is None

    def test_no_docstring(self):
        assert extract_docstring_summary(["    return 1"]) is None
        assert extract_docstring_summary([]) is None


@pytest.mark.parametrize(
    "comment, kind",
    [
        ("## Data loading", CommentKind.STRUCTURAL),
        ("# ---- config ----", CommentKind.STRUCTURAL),
        ("# ==========", CommentKind.STRUCTURAL),
        ("# TODO: handle empty batches", CommentKind.TODO),
        ("# fixme later", CommentKind.TODO),
        ("# x = compute()", CommentKind.DISABLED_CODE),
        ("# train(model)", CommentKind.DISABLED_CODE),
        ("# import torch", CommentKind.DISABLED_CODE),
        ("# hi", CommentKind.TRIVIAL),
        ("# Inputs:", CommentKind.EXPLANATORY),
        ("# This normalizes the input features", CommentKind.EXPLANATORY),
    ],
)
def test_classify_comment(comment, kind):
    assert classify_comment(comment) is kind


def test_definition_names_top_level_only():
    code = "class A:\n    def inner(self):\n        pass\ndef f():\n    pass\ndef f():\n    pass"
    assert definition_names(code) == ["A", "f"]


class TestSummarizeCell:
    def test_names_and_phrases(self):
        code = "def draw(ax):\n    plt.plot(ax)"
        assert summarize_cell(code) == "defines draw; plots figures"

    def test_clause_limit(self):
        code = "def a():\n    torch.load(x)\n    plt.plot(y)\n    model.fit(z)"
        # one names clause plus at most two phrases
        assert summarize_cell(code) == (
            "defines a; loads checkpoint/state_dict; runs training loop"
        )

    def test_name_limit(self):
        code = "def a(): pass\ndef b(): pass\ndef c(): pass\ndef d(): pass"
        assert summarize_cell(code) == "defines a, b, c"

    def test_content_elided(self):
        assert summarize_cell("x = 1") == "content elided"
