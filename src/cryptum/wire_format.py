"""
Negotiable wire format for Cryptum envelopes.

A WireFormat fixes the order of the four envelope components and the
number of random padding bytes written after each one. The format is
shared out of band; envelopes carry no format identifier.

Descriptor layout:
    [0]                version
    [1]                component count (N)
    [2 .. 2+N)         component ordinals (see ComponentKind)
    [2+N .. 2+2N)      padding length per component, in component order

Envelope layout, for each component in order:
    component bytes, then padding-length random bytes

Padding follows every component, including the last one.
"""

import logging
import os
import secrets
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .types import (
    DEFAULT_MAX_PADDING,
    DEFAULT_MIN_PADDING,
    DEFAULT_RSA_BLOCK_SIZE,
    FORMAT_VERSION,
    MAX_PADDING_LENGTH,
    MIN_COMPONENT_COUNT,
    NONCE_SIZE,
    REQUIRED_COMPONENTS,
    TAG_SIZE,
    ComponentKind,
    FormatError,
)

logger = logging.getLogger(__name__)


def component_size(kind: ComponentKind, rsa_block_size: int = DEFAULT_RSA_BLOCK_SIZE) -> Optional[int]:
    """
    Required size of a component in bytes.

    Args:
        kind: Component kind
        rsa_block_size: Byte length of the RSA modulus used for the session key block

    Returns:
        Size in bytes, or None for the variable-length ciphertext
    """
    if kind == ComponentKind.SESSION_KEY_BLOCK:
        return rsa_block_size
    if kind == ComponentKind.NONCE:
        return NONCE_SIZE
    if kind == ComponentKind.TAG:
        return TAG_SIZE
    if kind == ComponentKind.CIPHERTEXT:
        return None
    raise FormatError(f"{kind.name} is not an envelope component")


class WireFormat:
    """Immutable description of an envelope's component order and padding."""

    def __init__(
        self,
        component_order: Iterable[ComponentKind],
        padding_lengths: Mapping[ComponentKind, int],
        version: int = FORMAT_VERSION,
    ) -> None:
        """
        Create a wire format.

        Args:
            component_order: The four required component kinds, in envelope order
            padding_lengths: Padding bytes after each kind (0..255, missing kinds get 0)
            version: Format version

        Raises:
            FormatError: If the layout is invalid
        """
        try:
            order = tuple(ComponentKind(kind) for kind in component_order)
        except ValueError as exc:
            raise FormatError(f"Unknown component kind: {exc}") from exc

        if version != FORMAT_VERSION:
            raise FormatError(f"Unsupported format version: {version}")

        if len(set(order)) != len(order):
            raise FormatError("Component order contains duplicates")

        if set(order) != set(REQUIRED_COMPONENTS):
            raise FormatError(
                "Component order must contain exactly "
                + ", ".join(kind.name for kind in REQUIRED_COMPONENTS)
            )

        variable = [kind for kind in order if component_size(kind) is None]
        if len(variable) != 1:
            raise FormatError(f"Expected exactly one variable-length component, got {len(variable)}")

        padding: Dict[ComponentKind, int] = {}
        for kind, length in padding_lengths.items():
            if kind not in order:
                raise FormatError(f"Padding given for {ComponentKind(kind).name}, which is not in the order")
            if not isinstance(length, int) or not 0 <= length <= MAX_PADDING_LENGTH:
                raise FormatError(f"Padding length must be 0..{MAX_PADDING_LENGTH}, got {length!r}")
            padding[ComponentKind(kind)] = length

        self._version = version
        self._order = order
        self._padding = {kind: padding.get(kind, 0) for kind in order}

    @property
    def version(self) -> int:
        return self._version

    @property
    def component_order(self) -> Tuple[ComponentKind, ...]:
        return self._order

    @property
    def padding_lengths(self) -> Dict[ComponentKind, int]:
        return dict(self._padding)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WireFormat):
            return NotImplemented
        return (
            self._version == other._version
            and self._order == other._order
            and self._padding == other._padding
        )

    def __hash__(self) -> int:
        return hash((self._version, self._order, tuple(self._padding[k] for k in self._order)))

    def __repr__(self) -> str:
        layout = ", ".join(f"{kind.name}+{self._padding[kind]}" for kind in self._order)
        return f"WireFormat(v{self._version}: {layout})"

    @classmethod
    def generate_random(
        cls,
        min_padding: int = DEFAULT_MIN_PADDING,
        max_padding: int = DEFAULT_MAX_PADDING,
    ) -> "WireFormat":
        """
        Generate a random valid format.

        The required components are shuffled with a CSPRNG and each gets an
        independent padding length in [min_padding, max_padding].
        """
        if not 0 <= min_padding <= max_padding <= MAX_PADDING_LENGTH:
            raise FormatError(f"Invalid padding range: {min_padding}..{max_padding}")

        order = list(REQUIRED_COMPONENTS)
        secrets.SystemRandom().shuffle(order)

        span = max_padding - min_padding + 1
        padding = {kind: min_padding + secrets.randbelow(span) for kind in order}

        wire_format = cls(order, padding)
        logger.debug("Generated random wire format %r", wire_format)
        return wire_format

    def serialize(self) -> bytes:
        """Serialize the format descriptor for transmission."""
        return bytes(
            [self._version, len(self._order)]
            + [int(kind) for kind in self._order]
            + [self._padding[kind] for kind in self._order]
        )

    @classmethod
    def deserialize(cls, data: bytes) -> "WireFormat":
        """
        Deserialize a format descriptor.

        Args:
            data: Serialized descriptor

        Returns:
            WireFormat

        Raises:
            FormatError: If the descriptor is invalid
        """
        if len(data) < 2:
            raise FormatError(f"Format data too short: {len(data)} bytes")

        version = data[0]
        if version != FORMAT_VERSION:
            raise FormatError(f"Unsupported format version: {version}")

        count = data[1]
        if count < MIN_COMPONENT_COUNT:
            raise FormatError(f"Invalid component count: {count}")

        expected = 2 + 2 * count
        if len(data) < expected:
            raise FormatError(f"Format data truncated: {len(data)} bytes (expected {expected})")
        if len(data) > expected:
            raise FormatError(f"Trailing data after format descriptor: {len(data) - expected} bytes")

        order = []
        for index in data[2 : 2 + count]:
            if index >= len(ComponentKind):
                raise FormatError(f"Invalid component index: {index}")
            order.append(ComponentKind(index))

        padding = dict(zip(order, data[2 + count : expected]))
        return cls(order, padding, version=version)

    def fixed_size(self, rsa_block_size: int = DEFAULT_RSA_BLOCK_SIZE) -> int:
        """Total bytes taken by fixed-size components."""
        sizes = (component_size(kind, rsa_block_size) for kind in self._order)
        return sum(size for size in sizes if size is not None)

    def padding_size(self) -> int:
        """Total bytes of padding in every envelope."""
        return sum(self._padding.values())

    def overhead(self, rsa_block_size: int = DEFAULT_RSA_BLOCK_SIZE) -> int:
        """Envelope size for an empty payload."""
        return self.fixed_size(rsa_block_size) + self.padding_size()

    def pack(
        self,
        components: Mapping[ComponentKind, bytes],
        rsa_block_size: int = DEFAULT_RSA_BLOCK_SIZE,
    ) -> bytes:
        """
        Pack components into an envelope according to this format.

        Args:
            components: Bytes for every required component kind
            rsa_block_size: Required session key block size in bytes

        Returns:
            Envelope bytes

        Raises:
            FormatError: If a component is missing or has the wrong size
        """
        for kind in self._order:
            if kind not in components:
                raise FormatError(f"Missing component: {kind.name}")
            size = component_size(kind, rsa_block_size)
            if size is not None and len(components[kind]) != size:
                raise FormatError(
                    f"Invalid {kind.name} size: {len(components[kind])} bytes (expected {size})"
                )

        buffer = bytearray()
        for kind in self._order:
            buffer += components[kind]
            buffer += os.urandom(self._padding[kind])

        return bytes(buffer)

    def unpack(
        self,
        message: bytes,
        rsa_block_size: int = DEFAULT_RSA_BLOCK_SIZE,
    ) -> Dict[ComponentKind, bytes]:
        """
        Extract components from an envelope.

        The variable-length component's size is whatever remains after the
        fixed-size components and all padding are accounted for.

        Args:
            message: Envelope bytes
            rsa_block_size: Session key block size in bytes

        Returns:
            Mapping of component kind to bytes

        Raises:
            FormatError: If the envelope does not fit this format
        """
        fixed_total = self.fixed_size(rsa_block_size)
        padding_total = self.padding_size()

        variable_size = len(message) - fixed_total
        if variable_size < 0:
            raise FormatError(
                f"Envelope too short: {len(message)} bytes (fixed components need {fixed_total})"
            )
        variable_size -= padding_total
        if variable_size < 0:
            raise FormatError(
                f"Envelope too short: {len(message)} bytes "
                f"(fixed components and padding need {fixed_total + padding_total})"
            )

        components: Dict[ComponentKind, bytes] = {}
        position = 0
        for kind in self._order:
            size = component_size(kind, rsa_block_size)
            if size is None:
                size = variable_size

            end = position + size
            if end > len(message):
                raise FormatError(f"{kind.name} extends past end of envelope")
            components[kind] = bytes(message[position:end])

            position = end + self._padding[kind]
            if position > len(message):
                raise FormatError(f"Padding after {kind.name} extends past end of envelope")

        if position != len(message):
            raise FormatError(
                f"Envelope layout mismatch: consumed {position} of {len(message)} bytes"
            )

        return components
