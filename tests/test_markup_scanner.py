"""Tests for quote-aware, nesting-aware <Sequence> block scanning."""

from vd_core_utils import find_sequence_blocks, find_tag_end


def test_finds_sibling_blocks_in_order() -> None:
    source = (
        '<Sequence from={0} durationInFrames={90}><Intro title="Hi"/></Sequence>'
        '<Sequence from={90} durationInFrames={90}><Caption text="Dashboard."/></Sequence>'
    )

    blocks = find_sequence_blocks(source)

    assert [b.attrs for b in blocks] == [
        "from={0} durationInFrames={90}",
        "from={90} durationInFrames={90}",
    ]
    assert blocks[0].body == '<Intro title="Hi"/>'
    assert blocks[1].body == '<Caption text="Dashboard."/>'


def test_block_offsets_point_at_body() -> None:
    source = '<Sequence from={0}>abc</Sequence>'

    block = find_sequence_blocks(source)[0]

    assert source[block.start:block.end] == "abc"


def test_gt_inside_quoted_attribute_does_not_close_tag() -> None:
    source = '<Sequence name="a > b" from={0}>body</Sequence>'

    blocks = find_sequence_blocks(source)

    assert len(blocks) == 1
    assert blocks[0].attrs == 'name="a > b" from={0}'
    assert blocks[0].body == "body"


def test_unmatched_quote_in_attributes_is_not_a_string() -> None:
    source = "<Sequence it's from={0}>body</Sequence>"

    blocks = find_sequence_blocks(source)

    assert blocks[0].attrs == "it's from={0}"
    assert blocks[0].body == "body"


def test_nested_block_stays_inside_outer_body() -> None:
    inner = '<Sequence from={10} durationInFrames={20}><Caption text="inner"/></Sequence>'
    source = (
        '<Sequence from={0} durationInFrames={300}>'
        + inner
        + '<Caption text="after"/></Sequence>'
        '<Sequence from={300} durationInFrames={30}>tail</Sequence>'
    )

    blocks = find_sequence_blocks(source)

    assert len(blocks) == 2
    assert blocks[0].body == inner + '<Caption text="after"/>'
    assert blocks[1].body == "tail"

    nested = find_sequence_blocks(blocks[0].body)
    assert nested[0].attrs == "from={10} durationInFrames={20}"


def test_end_marker_inside_string_is_ignored() -> None:
    source = '<Sequence from={0}><Caption text="</Sequence>"/></Sequence>'

    blocks = find_sequence_blocks(source)

    assert blocks[0].body == '<Caption text="</Sequence>"/>'


def test_escaped_quote_does_not_end_string() -> None:
    source = '<Sequence from={0}><Caption text="a \\" </Sequence>"/></Sequence>'

    blocks = find_sequence_blocks(source)

    assert blocks[0].body == '<Caption text="a \\" </Sequence>"/>'


def test_self_closing_nested_sequence_does_not_change_depth() -> None:
    source = '<Sequence from={0}><Sequence from={5} /><Caption text="x"/></Sequence>'

    blocks = find_sequence_blocks(source)

    assert len(blocks) == 1
    assert blocks[0].body == '<Sequence from={5} /><Caption text="x"/>'


def test_longer_component_names_are_not_markers() -> None:
    source = '<SequenceList><Sequence from={0}>a</Sequence></SequenceList>'

    blocks = find_sequence_blocks(source)

    assert len(blocks) == 1
    assert blocks[0].body == "a"


def test_opening_tag_without_gt_stops_scanning() -> None:
    source = '<Sequence from={0}>a</Sequence><Sequence from={1}'

    blocks = find_sequence_blocks(source)

    assert [b.body for b in blocks] == ["a"]


def test_unclosed_body_stops_scanning() -> None:
    source = '<Sequence from={0}>a</Sequence><Sequence from={1}>b <Caption text="never closed'

    blocks = find_sequence_blocks(source)

    assert [b.body for b in blocks] == ["a"]


def test_no_blocks_in_plain_markup() -> None:
    assert find_sequence_blocks("<AbsoluteFill><div>Hello</div></AbsoluteFill>") == []


def test_find_tag_end_skips_quoted_gt() -> None:
    text = ' label="x > y">'
    assert find_tag_end(text, 0) == len(text) - 1
    assert find_tag_end(" no end", 0) == -1


def test_find_tag_end_with_unpaired_quotes_of_each_kind() -> None:
    text = ' a="x b=`y c=\'z' + ' d=1' * 5000 + '>'

    assert find_tag_end(text, 0) == len(text) - 1


def test_unpaired_quote_does_not_hide_later_pair() -> None:
    text = ' a="x b=\'q > r\' c>'

    assert find_tag_end(text, 0) == len(text) - 1
