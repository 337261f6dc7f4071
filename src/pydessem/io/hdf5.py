"""
HDF5 snapshot I/O for plant registries.

This module writes a :class:`PlantRegistry` to an HDF5 file and reads it
back. The file layout mirrors :meth:`PlantRegistry.to_arrays`, so a
snapshot read back compares equal to the registry that was written.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import h5py
import numpy as np
from numpy.typing import NDArray

from pydessem import __version__
from pydessem.components.registry import PlantRegistry
from pydessem.core.exceptions import FileFormatError


class HDF5RegistryWriter:
    """
    Writer for plant registries in HDF5 format.

    The HDF5 file structure:
        /plants/
            plant_num, name, subsystem, downstream_plant, ...
        /unit_sets/
            plant_num, set_num, num_units, unit_capacity, ...
        /travel_times/
            from_plant, to_plant, hours
        /curves/
            volume_elevation/, volume_area/, tailrace/
                plant_num, degree, coefficients
        /evaporation/
            plant_num, values (n x 12)
        /metadata/
            source_format, source_file, created, pydessem_version
    """

    def __init__(self, filepath: Path | str, compression: str | None = "gzip") -> None:
        """
        Initialize the writer.

        Args:
            filepath: Path to the output HDF5 file
            compression: Compression algorithm ('gzip', 'lzf', or None)
        """
        self.filepath = Path(filepath)
        self.compression = compression
        self._file: h5py.File | None = None

    def __enter__(self) -> HDF5RegistryWriter:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._file = h5py.File(self.filepath, "w")
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        if self._file:
            self._file.close()

    def _create_dataset(self, name: str, data: NDArray) -> h5py.Dataset:
        """Create a dataset with optional compression."""
        if self._file is None:
            raise RuntimeError("File not open")
        if data.dtype.kind == "U":
            return self._file.create_dataset(
                name, data=data.astype(object), dtype=h5py.string_dtype()
            )
        if self.compression and data.size > 100:
            return self._file.create_dataset(name, data=data, compression=self.compression)
        return self._file.create_dataset(name, data=data)

    def write_metadata(self, metadata: dict[str, Any]) -> None:
        """Write registry metadata as attributes of ``/metadata``."""
        if self._file is None:
            raise RuntimeError("File not open")

        meta_grp = self._file.require_group("metadata")
        for key, value in metadata.items():
            if isinstance(value, (str, int, float, bool)):
                meta_grp.attrs[key] = value
            elif isinstance(value, datetime):
                meta_grp.attrs[key] = value.isoformat()

    def write_registry(self, registry: PlantRegistry) -> None:
        """
        Write a complete PlantRegistry to the HDF5 file.

        Args:
            registry: PlantRegistry instance to write
        """
        for name, data in registry.to_arrays().items():
            self._create_dataset(name, data)

        self.write_metadata(
            {
                "source_format": registry.source_format,
                "source_file": str(registry.filepath) if registry.filepath else "",
                "created": datetime.now(),
                "pydessem_version": __version__,
            }
        )


class HDF5RegistryReader:
    """Reader for plant registries stored in HDF5 format."""

    def __init__(self, filepath: Path | str) -> None:
        """
        Initialize the reader.

        Args:
            filepath: Path to the HDF5 file
        """
        self.filepath = Path(filepath)
        self._file: h5py.File | None = None

    def __enter__(self) -> HDF5RegistryReader:
        self._file = h5py.File(self.filepath, "r")
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        if self._file:
            self._file.close()

    def read_metadata(self) -> dict[str, Any]:
        """Read the ``/metadata`` attributes."""
        if self._file is None:
            raise RuntimeError("File not open")
        if "metadata" not in self._file:
            return {}
        return {key: value for key, value in self._file["metadata"].attrs.items()}

    def read_arrays(self) -> dict[str, NDArray]:
        """Read every dataset, keyed by its path without the leading slash."""
        if self._file is None:
            raise RuntimeError("File not open")
        if "plants" not in self._file:
            raise FileFormatError("No plant data found in HDF5 file", filepath=self.filepath)

        arrays: dict[str, NDArray] = {}

        def visit(name: str, obj: object) -> None:
            if not isinstance(obj, h5py.Dataset):
                return
            if h5py.check_string_dtype(obj.dtype) is not None:
                arrays[name] = np.array(obj.asstr()[:], dtype=np.str_)
            else:
                arrays[name] = obj[:]

        self._file.visititems(visit)
        return arrays

    def read_registry(self) -> PlantRegistry:
        """Read the snapshot back into a PlantRegistry."""
        metadata = self.read_metadata()
        source_file = metadata.get("source_file") or ""
        return PlantRegistry.from_arrays(
            self.read_arrays(),
            source_format=str(metadata.get("source_format", "text")),
            filepath=Path(source_file) if source_file else None,
        )


# Convenience functions


def write_registry_hdf5(
    filepath: Path | str,
    registry: PlantRegistry,
    compression: str | None = "gzip",
) -> None:
    """
    Write a PlantRegistry to an HDF5 file.

    Args:
        filepath: Path to the output file
        registry: PlantRegistry to write
        compression: Compression algorithm
    """
    with HDF5RegistryWriter(filepath, compression=compression) as writer:
        writer.write_registry(registry)


def read_registry_hdf5(filepath: Path | str) -> PlantRegistry:
    """
    Read a PlantRegistry from an HDF5 file.

    Args:
        filepath: Path to the HDF5 file

    Returns:
        PlantRegistry instance
    """
    with HDF5RegistryReader(filepath) as reader:
        return reader.read_registry()
