# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Reading and writing of NRRD ("Nearly Raw Raster Data") files.

A NRRD file is a text header describing an N-d array (its element type,
sizes, spatial calibration, and arbitrary key/value metadata) followed by the
array's payload as raw binary, ASCII text, or gzip-compressed binary.  This
package reads such files into a `numpy.ndarray` and a `NrrdHeader`, and
writes them back:

- `read` and `write` work on in-memory `bytes`;
- `read_file`, `write_file`, and `read_header_file` work on anything
  convertible to `lsst.resources.ResourcePath`;
- `NrrdOptions` configures warnings, custom field grammars, byte order
  defaults, and the axis order of returned arrays.

Header values are parsed according to the grammar of their field (see
`FieldGrammar`), so e.g. ``sizes`` is a `list` of `int` and
``space directions`` is a 2-d `numpy.ndarray` with NaN rows for axes that are
not spatial.  Detached data files and the ``block`` element type are not
supported.
"""

from ._compression import *
from ._dtypes import *
from ._errors import *
from ._grammar import *
from ._header import *
from ._header_io import *
from ._nrrd import *
from ._options import *
from ._payload import *
from ._values import *
