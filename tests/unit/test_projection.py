from richtext.models import DEFAULT_COLOR, CanonicalPayload, Run, Style, TextOp
from richtext.projection import (
    expand_to_sequence,
    normalize_runs,
    plain_payload,
    project_to_payload,
)
from richtext.sequence import sanitize_sequence


def _bold_payload() -> dict:
    return {
        "text": "hello",
        "runs": [{"start": 0, "end": 5, "style": {"bold": True, "fontSize": 24}}],
    }


def test_consecutive_equal_attributes_merge_into_one_run() -> None:
    payload = project_to_payload(
        [
            {"content": "abc", "attributes": {"bold": True}},
            {"content": "def", "attributes": {"bold": True}},
            {"content": "\n"},
        ]
    )
    assert payload.text == "abcdef"
    assert payload.runs == (Run(start=0, end=6, style=Style(bold=True)),)


def test_style_changes_start_new_runs() -> None:
    payload = project_to_payload(
        [
            {"content": "ab", "attributes": {"italic": True}},
            {"content": "cd", "attributes": {"color": "#ff0000"}},
            {"content": "ef\n", "attributes": {"color": "#ff0000"}},
        ]
    )
    assert payload.text == "abcdef"
    assert payload.runs == (
        Run(start=0, end=2, style=Style(italic=True)),
        Run(start=2, end=6, style=Style(color="#ff0000")),
    )


def test_block_attributes_do_not_split_runs() -> None:
    payload = project_to_payload(
        [
            {"content": "Title"},
            {"content": "\n", "attributes": {"header": 1, "align": "center"}},
            {"content": "body\n", "attributes": {"list": "bullet"}},
        ]
    )
    assert payload.text == "Title\nbody"
    assert payload.runs == (Run(start=0, end=10, style=Style()),)


def test_mention_projects_as_literal_text() -> None:
    payload = project_to_payload(
        [{"mention": {"uid": "u1", "nickname": "tester"}}, {"content": " hi\n"}]
    )
    assert payload.text == "@tester hi"
    assert payload.runs == (Run(start=0, end=10, style=Style()),)


def test_mention_uses_default_style_between_styled_text() -> None:
    payload = project_to_payload(
        [
            {"content": "hey ", "attributes": {"bold": True}},
            {"insert": {"mention-chip": {"uid": "u1", "nickname": "kim"}}},
            {"content": "!\n", "attributes": {"bold": True}},
        ]
    )
    assert payload.text == "hey @kim!"
    assert [(run.start, run.end, run.style.bold) for run in payload.runs] == [
        (0, 4, True),
        (4, 8, False),
        (8, 9, True),
    ]


def test_projection_sanitizes_raw_styles() -> None:
    payload = project_to_payload(
        [{"content": "x", "attributes": {"size": "200px", "link": "javascript:alert(1)"}}],
        10,
        48,
    )
    assert payload.text == "x"
    assert payload.runs == (Run(start=0, end=1, style=Style(font_size=48)),)


def test_only_one_trailing_newline_is_stripped() -> None:
    payload = project_to_payload([{"content": "a\n\n"}])
    assert payload.text == "a\n"
    assert payload.runs == (Run(start=0, end=2, style=Style()),)


def test_trailing_newline_run_is_dropped_after_clipping() -> None:
    payload = project_to_payload(
        [
            {"content": "bold", "attributes": {"bold": True}},
            {"content": "\n", "attributes": {"italic": True}},
        ]
    )
    assert payload.text == "bold"
    assert payload.runs == (Run(start=0, end=4, style=Style(bold=True)),)


def test_empty_sequences_project_to_empty_payload() -> None:
    assert project_to_payload(None) == CanonicalPayload(text="", runs=())
    assert project_to_payload([{"content": "\n"}]) == CanonicalPayload(text="", runs=())


def test_expand_ends_with_newline_operation() -> None:
    ops = expand_to_sequence(_bold_payload(), 10, 48)
    assert ops[-1].content == "\n"
    assert ops[0] == TextOp(
        content="hello",
        attributes={"bold": True, "color": DEFAULT_COLOR, "size": "24px"},
    )


def test_round_trip_reproduces_text_and_runs() -> None:
    payload = _bold_payload()
    projected = project_to_payload(expand_to_sequence(payload, 10, 48), 10, 48)
    assert projected.text == "hello"
    assert projected.runs == (Run(start=0, end=5, style=Style(bold=True, font_size=24)),)


def test_round_trip_with_several_styles_and_trailing_newline() -> None:
    original = CanonicalPayload(
        text="plain bold link\n",
        runs=(
            Run(start=0, end=6, style=Style()),
            Run(start=6, end=11, style=Style(bold=True, underline=True)),
            Run(start=11, end=16, style=Style(link="https://example.com", color="#336699")),
        ),
    )
    assert project_to_payload(expand_to_sequence(original)) == original


def test_expand_fills_gaps_with_default_style() -> None:
    ops = expand_to_sequence(
        {"text": "hello world", "runs": [{"start": 6, "end": 11, "style": {"italic": True}}]}
    )
    assert [op.content for op in ops] == ["hello ", "world", "\n"]
    assert ops[0].attributes.italic is None
    assert ops[0].attributes.color == DEFAULT_COLOR
    assert ops[1].attributes.italic is True


def test_expand_without_runs_uses_one_default_run() -> None:
    ops = expand_to_sequence({"text": "just text"})
    assert [op.content for op in ops] == ["just text", "\n"]
    assert project_to_payload(ops) == plain_payload("just text")


def test_expand_empty_payload_is_single_newline() -> None:
    for payload in (None, {}, {"text": ""}, {"text": 5, "runs": "bad"}):
        ops = expand_to_sequence(payload)
        assert len(ops) == 1
        assert ops[0].content == "\n"


def test_expand_clips_runs_past_text_end_and_drops_invalid_runs() -> None:
    ops = expand_to_sequence(
        {
            "text": "abc",
            "runs": [
                {"start": 1, "end": 99, "style": {"bold": True}},
                {"start": 2, "end": 2, "style": {"italic": True}},
                {"start": "x", "end": -5},
                {"start": 10, "end": 20, "style": {"underline": True}},
            ],
        }
    )
    assert [(op.content, op.attributes.bold) for op in ops] == [
        ("a", None),
        ("bc", True),
        ("\n", None),
    ]


def test_expand_overlapping_runs_keeps_earlier_run_and_text_once() -> None:
    payload = {
        "text": "abcdefg",
        "runs": [
            {"start": 2, "end": 7, "style": {"italic": True}},
            {"start": 0, "end": 5, "style": {"bold": True}},
            {"start": 1, "end": 3, "style": {"underline": True}},
        ],
    }
    ops = expand_to_sequence(payload)
    assert [op.content for op in ops] == ["abcde", "fg", "\n"]
    assert ops[0].attributes.bold is True
    assert ops[1].attributes.italic is True

    projected = project_to_payload(ops)
    assert projected.text == "abcdefg"
    assert [(run.start, run.end) for run in projected.runs] == [(0, 5), (5, 7)]


def test_expand_output_is_already_sanitized() -> None:
    ops = expand_to_sequence(
        {"text": "x", "runs": [{"start": 0, "end": 1, "style": {"fontSize": 500, "link": "javascript:1"}}]},
        10,
        48,
    )
    assert sanitize_sequence(ops, 10, 48) == ops
    assert ops[0].attributes.size == "48px"
    assert ops[0].attributes.link is None


def test_normalize_runs_sorts_and_coerces_bounds() -> None:
    runs = normalize_runs(
        "abcdef",
        [
            {"start": 4, "end": 6},
            {"start": 0.7, "end": "2"},
            Run(start=0, end=1, style=Style(bold=True)),
        ],
    )
    assert [(run.start, run.end) for run in runs] == [(0, 1), (0, 2), (4, 6)]
    assert runs[0].style.bold is True


def test_plain_payload_covers_whole_text() -> None:
    assert plain_payload("hi") == CanonicalPayload(text="hi", runs=(Run(start=0, end=2),))
    assert plain_payload("") == CanonicalPayload(text="", runs=())
