"""
Core Morphing Logic
===================

Single responsibility: Displace a base vertex buffer by sparse morph channels.

The buffer is a flat, index-addressed float32 tensor (``3 * index + axis``).
Each slider adds ``value * channel.scale * delta`` to the vertices its
channel touches, so the cost is proportional to the number of touched
entries, not to the vertex count. The function is pure: the base buffer
is never modified.
"""

from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np
import torch

from bodymorph.core.descriptor import parse_descriptor
from bodymorph.core.exceptions import MorphIndexError
from bodymorph.core.tri import MorphChannel, TriFile
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

VertexBuffer = Union[torch.Tensor, np.ndarray, Iterable[float]]


def index_morphs(tri: TriFile) -> Dict[str, MorphChannel]:
    """Map channel name to channel; the first channel wins on duplicate names."""
    index: Dict[str, MorphChannel] = {}
    for morph in tri.morphs:
        index.setdefault(morph.name, morph)
    return index


def _as_buffer(base: VertexBuffer, device: Optional[torch.device]) -> torch.Tensor:
    if isinstance(base, torch.Tensor):
        out = base.detach().to(device=device, dtype=torch.float32).clone()
    else:
        out = torch.tensor(np.asarray(base, dtype=np.float32), device=device)

    if out.numel() % 3 != 0:
        raise ValueError(
            f"Vertex buffer length must be a multiple of 3, got {out.numel()}"
        )
    return out


def apply_morphs(
    base: VertexBuffer,
    tri: TriFile,
    sliders: Iterable[Tuple[str, float]],
    device: Optional[torch.device] = None,
    channel_index: Optional[Dict[str, MorphChannel]] = None,
) -> torch.Tensor:
    """
    Apply slider values to a base vertex buffer.

    Sliders with value 0 are skipped. Sliders without a matching channel
    are skipped silently; that is expected for sliders a body does not use.
    Two sliders naming the same channel add up.

    Args:
        base: Flat (3N,) or (N, 3) vertex positions
        tri: Decoded morph channels for this mesh
        sliders: (name, value) pairs
        device: Torch device for the result (default: base's device or CPU)
        channel_index: Prebuilt ``index_morphs(tri)`` to reuse across calls

    Returns:
        New float32 tensor with the same shape as ``base``

    Raises:
        MorphIndexError: If a channel references a vertex beyond the buffer

    Example:
        >>> out = apply_morphs([0.0, 0.0, 0.0], tri, [("BigButt", 2.0)])
        >>> out.tolist()
        [2.0, 0.0, -1.0]
    """
    out = _as_buffer(base, device)
    shape = out.shape
    verts = out.reshape(-1, 3)
    num_vertices = verts.shape[0]
    index = channel_index if channel_index is not None else index_morphs(tri)

    with torch.no_grad():
        for name, value in sliders:
            if not value:
                continue

            channel = index.get(name)
            if channel is None:
                logger.debug(f"No morph found for slider '{name}'")
                continue
            if len(channel) == 0:
                continue

            max_index = int(channel.indices.max())
            if max_index >= num_vertices:
                raise MorphIndexError(channel.name, max_index, num_vertices)

            idx = torch.from_numpy(channel.indices.astype(np.int64)).to(verts.device)
            deltas = torch.from_numpy(channel.deltas.astype(np.float32)).to(verts.device)
            verts.index_add_(0, idx, deltas * (float(value) * channel.scale))

    return verts.reshape(shape)


class MorphApplier:
    """
    Morph preview for one TRI file.

    Single responsibility: Reuse the channel index of one TriFile across
    many preview updates.
    """

    def __init__(self, tri: TriFile, device: Optional[torch.device] = None):
        """
        Initialize applier.

        Args:
            tri: Decoded morph channels
            device: PyTorch device for results
        """
        self.tri = tri
        self.device = device
        self._index = index_morphs(tri)

    def apply(self, base: VertexBuffer, sliders: Iterable[Tuple[str, float]]) -> torch.Tensor:
        """Apply (name, value) sliders; see ``apply_morphs``."""
        return apply_morphs(base, self.tri, sliders, self.device, self._index)

    def apply_descriptor(self, base: VertexBuffer, descriptor: str) -> torch.Tensor:
        """Apply a ``name@value,...`` descriptor."""
        return self.apply(base, parse_descriptor(descriptor))

    def displacement(self, base: VertexBuffer, sliders: Iterable[Tuple[str, float]]) -> torch.Tensor:
        """Morphed minus base positions."""
        base_tensor = _as_buffer(base, self.device)
        return self.apply(base_tensor, sliders) - base_tensor

    def has_channel(self, name: str) -> bool:
        return name in self._index


def create_applier(tri: TriFile, device: Optional[torch.device] = None) -> MorphApplier:
    """
    Factory function to create an applier.

    Args:
        tri: Decoded morph channels
        device: PyTorch device

    Returns:
        MorphApplier instance
    """
    return MorphApplier(tri, device)
