"""
Link Constants for the Pico Playground Board
============================================

Transport settings, timing and limits shared by the codec, the port
resolver, the link session and the motion sequencer.

Wire Overview
-------------
Host → Device (COBS framed, 0x00 terminated):
    0x00                  - ResetToBootloader
    0x01 a b c d          - Motor drive levels (int8 each)
    0x02 s                - Status LED (0 = off, 1 = on)

Device → Host:
    Unframed UTF-8 text (logs, telemetry). No schema.
"""

# Serial transport (8N1)
DEFAULT_BAUDRATE = 115200
READ_TIMEOUT = 0.1           # seconds, bounds every reader read
READER_JOIN_TIMEOUT = 1.0    # seconds to wait for the reader on close

# USB serial-number string reported by the board
DEVICE_IDENTITY = "picoplayground"

# Framing
FRAME_DELIMITER = 0x00
MAX_FRAME_SIZE = 256         # inbound partial frames beyond this are dropped

# Motion
DRIVE_LIMIT = 100            # ramp/hold levels are clamped to ±DRIVE_LIMIT
RAMP_STEP_DELAY = 0.05       # seconds between ramp steps

# Time the board needs to drop off the bus after a bootloader reset
RESET_SETTLE_DELAY = 1.0
