from __future__ import annotations

from typing import Any, TypeAlias

import numpy as np
import numpy.typing as npt

NDArrayAny: TypeAlias = npt.NDArray[np.generic]
NDArrayFloat: TypeAlias = npt.NDArray[np.floating[Any]]
NDArrayComplex: TypeAlias = npt.NDArray[np.complexfloating[Any, Any]]

# Prototype or polyphase taps; real, or complex with zero imaginary part
TapsArray: TypeAlias = npt.NDArray[np.floating[Any] | np.complexfloating[Any, Any]]
# Stream samples handled by the kernel (float32 or complex64 in practice)
SampleArray: TypeAlias = npt.NDArray[np.floating[Any] | np.complexfloating[Any, Any]]
