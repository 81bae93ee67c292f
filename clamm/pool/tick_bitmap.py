"""Packed bitmap of initialized ticks.

One bit per multiple of the tick spacing. Bits are grouped into 256-bit
words keyed by `compressed_tick >> 8`, and only non-empty words are stored,
so the whole tick domain costs nothing until ticks are used.
"""

from __future__ import annotations

from clamm.errors import DomainError

__all__ = ["TickBitmap", "position"]

_WORD_BITS = 256
_WORD_MASK = (1 << _WORD_BITS) - 1


def position(compressed_tick: int) -> tuple[int, int]:
    """Word index and bit index of a compressed tick.

    Negative ticks land in negative words; the arithmetic shift keeps bit
    order increasing with tick.
    """
    return compressed_tick >> 8, compressed_tick & 0xFF


def _most_significant_bit(x: int) -> int:
    return x.bit_length() - 1


def _least_significant_bit(x: int) -> int:
    return (x & -x).bit_length() - 1


class TickBitmap:
    """Sparse bitset over spaced tick indices."""

    def __init__(self) -> None:
        self._words: dict[int, int] = {}

    def __len__(self) -> int:
        """Number of non-empty words."""
        return len(self._words)

    def word(self, word_position: int) -> int:
        """Raw 256-bit word, zero if not stored."""
        return self._words.get(word_position, 0)

    def is_initialized(self, tick: int, tick_spacing: int) -> bool:
        word_position, bit_position = position(tick // tick_spacing)
        return bool(self.word(word_position) >> bit_position & 1)

    def flip_tick(self, tick: int, tick_spacing: int) -> None:
        """Toggle the bit for a tick.

        Raises:
            DomainError: If the tick is not a multiple of the spacing
        """
        if tick % tick_spacing != 0:
            raise DomainError(f"Tick {tick} is not a multiple of spacing {tick_spacing}")
        word_position, bit_position = position(tick // tick_spacing)
        word = self.word(word_position) ^ (1 << bit_position)
        if word:
            self._words[word_position] = word
        else:
            self._words.pop(word_position, None)

    def next_initialized_tick_within_one_word(
        self,
        tick: int,
        tick_spacing: int,
        lte: bool,
    ) -> tuple[int, bool]:
        """Find the next initialized tick in the same word as `tick`.

        Only one word is searched. When nothing is set the word's boundary tick
        is returned with initialized=False, and the caller simply steps to it.

        Args:
            tick: Starting tick
            tick_spacing: Pool tick spacing
            lte: Search to the left, including `tick` itself; otherwise search
                strictly to the right

        Returns:
            (next_tick, initialized)
        """
        compressed = tick // tick_spacing

        if lte:
            word_position, bit_position = position(compressed)
            # All bits at or to the right of bit_position
            mask = (1 << bit_position) - 1 + (1 << bit_position)
            masked = self.word(word_position) & mask

            initialized = masked != 0
            if initialized:
                next_tick = (compressed - (bit_position - _most_significant_bit(masked))) * tick_spacing
            else:
                next_tick = (compressed - bit_position) * tick_spacing
            return next_tick, initialized

        # Start from the next tick; its state is what matters when moving up
        word_position, bit_position = position(compressed + 1)
        # All bits at or to the left of bit_position
        mask = ~((1 << bit_position) - 1) & _WORD_MASK
        masked = self.word(word_position) & mask

        initialized = masked != 0
        if initialized:
            next_tick = (
                compressed + 1 + (_least_significant_bit(masked) - bit_position)
            ) * tick_spacing
        else:
            next_tick = (compressed + 1 + (_WORD_BITS - 1 - bit_position)) * tick_spacing
        return next_tick, initialized
