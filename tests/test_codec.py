"""
Tests for the command model and frame codec
===========================================

Run with:
    pytest tests/test_codec.py -v
"""

import pytest
from cobs import cobs

from picolink import (
    CommandType,
    ResetToBootloader, MotorCommand, LedCommand,
    encode, decode, serialize, deserialize, FrameBuffer,
    DecodeError, MalformedFrameError, UnknownVariantError,
)


SAMPLE_COMMANDS = (
    [ResetToBootloader(), LedCommand(True), LedCommand(False), MotorCommand.stop()]
    + [MotorCommand.uniform(level) for level in range(-128, 128)]
    + [
        MotorCommand(5, -5, 0, 127),
        MotorCommand(-128, 127, -1, 1),
        MotorCommand(0, 0, 0, 1),
        MotorCommand(1, 0, 0, 0),
        MotorCommand(0, -100, 0, 100),
    ]
)


# =============================================================================
# COMMAND MODEL
# =============================================================================

class TestCommandModel:
    """Construction, equality and range checks."""

    def test_discriminants_are_fixed(self):
        assert CommandType.RESET_TO_BOOTLOADER == 0
        assert CommandType.MOTOR == 1
        assert CommandType.LED == 2
        assert ResetToBootloader.TYPE is CommandType.RESET_TO_BOOTLOADER
        assert MotorCommand.TYPE is CommandType.MOTOR
        assert LedCommand.TYPE is CommandType.LED

    def test_structural_equality(self):
        assert MotorCommand(1, 2, 3, 4) == MotorCommand(1, 2, 3, 4)
        assert MotorCommand(1, 2, 3, 4) != MotorCommand(4, 3, 2, 1)
        assert ResetToBootloader() == ResetToBootloader()
        assert LedCommand(True) != LedCommand(False)

    def test_different_variants_never_equal(self):
        assert LedCommand(False) != ResetToBootloader()
        assert MotorCommand.stop() != LedCommand(False)

    def test_hashable(self):
        commands = {MotorCommand(1, 1, 1, 1), MotorCommand(1, 1, 1, 1), LedCommand(True)}
        assert len(commands) == 2

    def test_immutable(self):
        command = MotorCommand(1, 2, 3, 4)
        with pytest.raises(AttributeError):
            command.a = 10

    def test_motor_range_boundaries_accepted(self):
        assert MotorCommand(-128, 127, -128, 127).a == -128

    @pytest.mark.parametrize("level", [128, -129, 300])
    def test_motor_out_of_range_rejected(self, level):
        with pytest.raises(ValueError):
            MotorCommand(0, level, 0, 0)

    def test_uniform(self):
        assert MotorCommand.uniform(-40) == MotorCommand(-40, -40, -40, -40)

    def test_stop_is_all_zero(self):
        assert MotorCommand.stop() == MotorCommand(0, 0, 0, 0)

    def test_led_status_coerced_to_bool(self):
        assert LedCommand(1).status is True
        assert LedCommand(0) == LedCommand(False)


# =============================================================================
# SERIALIZATION LAYOUT
# =============================================================================

class TestSerialize:
    """Discriminant first, then fixed-width fields, no padding."""

    def test_reset_is_discriminant_only(self):
        assert serialize(ResetToBootloader()) == b'\x00'

    def test_motor_layout(self):
        assert serialize(MotorCommand(5, -5, 0, 127)) == bytes([1, 5, 0xFB, 0, 0x7F])

    def test_motor_negative_extreme(self):
        assert serialize(MotorCommand(-128, -1, 0, 0)) == bytes([1, 0x80, 0xFF, 0, 0])

    def test_led_layout(self):
        assert serialize(LedCommand(True)) == b'\x02\x01'
        assert serialize(LedCommand(False)) == b'\x02\x00'

    def test_deserialize_inverse(self):
        for command in SAMPLE_COMMANDS:
            assert deserialize(serialize(command)) == command


# =============================================================================
# FRAME ENCODING
# =============================================================================

class TestEncode:
    """COBS stuffing and termination."""

    def test_reset_frame(self):
        assert encode(ResetToBootloader()) == b'\x01\x01\x00'

    def test_motor_frame(self):
        frame = encode(MotorCommand(5, -5, 0, 127))
        assert frame == bytes([0x04, 0x01, 0x05, 0xFB, 0x02, 0x7F, 0x00])

    def test_led_frames(self):
        assert encode(LedCommand(True)) == b'\x03\x02\x01\x00'
        assert encode(LedCommand(False)) == b'\x02\x02\x01\x00'

    def test_stop_frame(self):
        assert encode(MotorCommand.stop()) == b'\x02\x01\x01\x01\x01\x01\x00'

    def test_delimiter_only_at_end(self):
        for command in SAMPLE_COMMANDS:
            frame = encode(command)
            assert frame[-1] == 0
            assert 0 not in frame[:-1], command

    def test_deterministic(self):
        for command in SAMPLE_COMMANDS:
            assert encode(command) == encode(command)
        assert encode(MotorCommand(1, 2, 3, 4)) == encode(MotorCommand(1, 2, 3, 4))

    def test_overhead_is_bounded(self):
        for command in SAMPLE_COMMANDS:
            # one COBS code byte per <=254 bytes, plus the delimiter
            assert len(encode(command)) <= len(serialize(command)) + 2


# =============================================================================
# FRAME DECODING
# =============================================================================

class TestDecode:
    """Round trips and error classification."""

    def test_round_trip(self):
        for command in SAMPLE_COMMANDS:
            assert decode(encode(command)) == command

    def test_motor_scenario(self):
        original = MotorCommand(a=5, b=-5, c=0, d=127)
        assert decode(encode(original)) == MotorCommand(a=5, b=-5, c=0, d=127)

    def test_led_scenario(self):
        assert decode(encode(LedCommand(status=True))) == LedCommand(status=True)

    def test_reset_scenario(self):
        assert decode(encode(ResetToBootloader())) == ResetToBootloader()

    def test_terminator_optional(self):
        frame = encode(MotorCommand(1, -2, 3, -4))
        assert decode(frame[:-1]) == MotorCommand(1, -2, 3, -4)

    def test_premature_delimiter(self):
        with pytest.raises(MalformedFrameError):
            decode(b'\x03\x02\x00\x01\x00')

    def test_truncated_code_block(self):
        with pytest.raises(MalformedFrameError):
            decode(b'\x05\x01\x02\x00')

    def test_empty_frame(self):
        with pytest.raises(MalformedFrameError):
            decode(b'\x00')

    def test_unknown_variant(self):
        with pytest.raises(UnknownVariantError) as exc_info:
            decode(cobs.encode(b'\x07\x01') + b'\x00')
        assert exc_info.value.discriminant == 7

    def test_motor_wrong_length(self):
        with pytest.raises(MalformedFrameError):
            decode(cobs.encode(b'\x01\x02\x03') + b'\x00')

    def test_led_invalid_status_byte(self):
        with pytest.raises(MalformedFrameError):
            decode(cobs.encode(b'\x02\x02') + b'\x00')

    def test_reset_with_payload(self):
        with pytest.raises(MalformedFrameError):
            decode(cobs.encode(b'\x00\x05') + b'\x00')

    def test_decode_errors_share_base(self):
        assert issubclass(MalformedFrameError, DecodeError)
        assert issubclass(UnknownVariantError, DecodeError)


# =============================================================================
# INBOUND STREAM SPLITTING
# =============================================================================

class TestFrameBuffer:
    """Splitting a byte stream on the delimiter."""

    def test_multiple_frames_in_one_chunk(self):
        stream = encode(LedCommand(True)) + encode(MotorCommand(1, 2, 3, 4))
        frames = FrameBuffer().feed(stream)
        assert [decode(f) for f in frames] == [LedCommand(True), MotorCommand(1, 2, 3, 4)]

    def test_frame_split_across_chunks(self):
        buf = FrameBuffer()
        frame = encode(MotorCommand(-7, 7, -7, 7))
        assert buf.feed(frame[:3]) == []
        assert buf.pending == 3
        frames = buf.feed(frame[3:])
        assert [decode(f) for f in frames] == [MotorCommand(-7, 7, -7, 7)]
        assert buf.pending == 0

    def test_empty_frames_skipped(self):
        frames = FrameBuffer().feed(b'\x00\x00' + encode(ResetToBootloader()) + b'\x00')
        assert [decode(f) for f in frames] == [ResetToBootloader()]

    def test_oversized_frame_dropped_then_resync(self):
        buf = FrameBuffer(max_frame_size=8)
        frames = buf.feed(b'\x7f' * 20 + b'\x00' + encode(LedCommand(False)))
        assert [decode(f) for f in frames] == [LedCommand(False)]
        assert buf.overflows == 1

    def test_reset_discards_partial(self):
        buf = FrameBuffer()
        buf.feed(b'\x03\x02')
        buf.reset()
        assert buf.pending == 0
        assert buf.feed(encode(LedCommand(True))) == [encode(LedCommand(True))[:-1]]
