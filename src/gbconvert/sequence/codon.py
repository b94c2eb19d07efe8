# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence"
__author__ = "The gbconvert contributors"
__all__ = [
    "CodonTable",
    "GeneticCode",
    "DEFAULT_GENETIC_CODE",
    "resolve_genetic_code",
    "codon_to_amino_acid",
    "get_codon_table",
]

import functools
import warnings
from enum import Enum
from numbers import Integral
from os.path import dirname, join, realpath
import numpy as np
from ..exceptions import ResourceNotFoundError

# The nucleotides in the order of their code
_NUC_SYMBOLS = "TCAG"
_UNKNOWN = "X"

# Multiplier array that converts a codon in code representation
# into a unique integer
_radix = len(_NUC_SYMBOLS)
_radix_multiplier = np.array([_radix**n for n in (2, 1, 0)], dtype=int)

# Maps ASCII values to nucleotide codes,
# '-1' marks symbols that are not an unambiguous nucleotide
_ascii_to_code = np.full(256, -1, dtype=int)
for _code, _symbol in enumerate(_NUC_SYMBOLS):
    _ascii_to_code[ord(_symbol)] = _code
    _ascii_to_code[ord(_symbol.lower())] = _code
# 'U' is equivalent to 'T'
_ascii_to_code[ord("U")] = _NUC_SYMBOLS.index("T")
_ascii_to_code[ord("u")] = _NUC_SYMBOLS.index("T")


class CodonTable(object):
    """
    A :class:`CodonTable` maps a codon (sequence of 3 nucleotides) to an
    amino acid.
    It also defines start codons, which are translated into
    methionine at the beginning of a coding region.

    The :func:`load()` method allows loading of NCBI codon tables.

    Objects of this class are immutable.

    Parameters
    ----------
    codon_dict : dict of (str -> str)
        A dictionary that maps codons to amino acids. The keys must be
        strings of length 3 and the values strings of length 1
        (all upper case).
        ``'*'`` denotes a stop codon.
        The dictionary must provide entries for all 64 possible codons.
    starts : iterable object of str
        The start codons. Each entry must be a string of length 3
        (all upper case).

    Examples
    --------

    Get the amino acid coded by a given codon:

    >>> table = CodonTable.load(1)
    >>> print(table["ATG"])
    M
    >>> print(table["uga"])
    *

    Get the codons coding for a given amino acid:

    >>> print(table["M"])
    ('ATG',)

    Codons containing ambiguous symbols are mapped to ``'X'``:

    >>> print(table["ANG"])
    X
    """

    # For efficient mapping of codons to amino acids the class maps
    # each possible codon into a unique number using a radix based
    # approach.
    # For example the codon (3,1,2) would be represented as
    # 3*16 + 1*4 + 2*1 = 54

    # file for builtin codon tables from NCBI
    _table_file = join(dirname(realpath(__file__)), "codon_tables.txt")

    def __init__(self, codon_dict, starts):
        # Check if 'starts' is iterable object of length 3 string
        starts = list(starts)
        for start in starts:
            if not isinstance(start, str) or len(start) != 3:
                raise ValueError(f"Invalid codon '{start}' as start codon")
        # Internally store codons as single unique numbers
        self._starts = np.array(
            sorted(CodonTable._to_number(_encode(start)) for start in starts),
            dtype=int,
        )
        # Use 0 as error code
        # The array uses the number representation of codons as index
        # and stores the ASCII value of the corresponding amino acid
        self._codons = np.zeros(_radix**3, dtype=np.uint8)
        for key, value in codon_dict.items():
            codon_code = _encode(key)
            if len(codon_code) != 3 or (codon_code == -1).any():
                raise ValueError(f"Invalid codon '{key}'")
            if not isinstance(value, str) or len(value) != 1:
                raise ValueError(f"Invalid amino acid '{value}'")
            self._codons[CodonTable._to_number(codon_code)] = ord(value)
        self._codons.setflags(write=False)
        if (self._codons == 0).any():
            # Find the missing codon
            missing_index = np.where(self._codons == 0)[0][0]
            codon_str = CodonTable._to_codon_string(missing_index)
            raise ValueError(
                f"Codon dictionary does not contain codon '{codon_str}'"
            )

    def __repr__(self):
        """Represent CodonTable as a string for debugging."""
        return f"CodonTable({self.codon_dict()}, {self.start_codons()})"

    def __eq__(self, item):
        if not isinstance(item, CodonTable):
            return False
        if self.codon_dict() != item.codon_dict():
            return False
        if self.start_codons() != item.start_codons():
            return False
        return True

    def __ne__(self, item):
        return not self == item

    def __hash__(self):
        return hash((self._codons.tobytes(), self._starts.tobytes()))

    def __getitem__(self, item):
        if not isinstance(item, str):
            raise TypeError(
                f"Expected 'str' as index, not '{type(item).__name__}'"
            )
        if len(item) == 1:
            # Amino acid -> return possible codons
            codon_numbers = np.where(self._codons == ord(item.upper()))[0]
            return tuple(
                CodonTable._to_codon_string(number) for number in codon_numbers
            )
        elif len(item) == 3:
            # Codon -> return corresponding amino acid
            return self.map_codons(item)
        else:
            raise ValueError(f"'{item}' is an invalid index")

    def map_codons(self, nucleotides):
        """
        Efficiently map consecutive codons to the corresponding amino
        acids.

        Parameters
        ----------
        nucleotides : str
            The nucleotide sequence to be mapped.
            The length of the string must be a multiple of 3.
            The mapping is case-insensitive and ``'U'`` is treated as
            ``'T'``.

        Returns
        -------
        amino_acids : str
            The amino acids, one for each codon.
            Stop codons are mapped to ``'*'``, codons containing other
            symbols than unambiguous nucleotides are mapped to ``'X'``.

        Examples
        --------

        >>> table = CodonTable.load("Standard")
        >>> print(table.map_codons("ATGGTTTAA"))
        MV*
        """
        if len(nucleotides) % 3 != 0:
            raise ValueError(
                f"Sequence length {len(nucleotides)} is not a multiple of 3"
            )
        if len(nucleotides) == 0:
            return ""
        codon_codes = _encode(nucleotides).reshape(-1, 3)
        invalid = (codon_codes == -1).any(axis=-1)
        # Map invalid codons to an arbitrary valid number first
        codon_numbers = CodonTable._to_number(np.where(
            codon_codes == -1, 0, codon_codes
        ))
        aa_ascii = self._codons[codon_numbers]
        aa_ascii = np.where(invalid, ord(_UNKNOWN), aa_ascii).astype(np.uint8)
        return aa_ascii.tobytes().decode("ASCII")

    def is_start_codon(self, codon):
        """
        Check whether the given codon is a start codon.

        Parameters
        ----------
        codon : str
            The codon.

        Returns
        -------
        is_start : bool
            True, if the codon is a start codon.
        """
        codon_code = _encode(codon)
        if len(codon_code) != 3 or (codon_code == -1).any():
            return False
        return bool(np.isin(CodonTable._to_number(codon_code), self._starts))

    def codon_dict(self):
        """
        Get the codon to amino acid mappings dictionary.

        Returns
        -------
        codon_dict : dict of (str -> str)
            The dictionary mapping codons to amino acids.
        """
        return {
            CodonTable._to_codon_string(number): chr(aa)
            for number, aa in enumerate(self._codons)
        }

    def start_codons(self):
        """
        Get the start codons of the codon table.

        Returns
        -------
        start_codons : tuple of str
            The start codons.
        """
        return tuple(
            CodonTable._to_codon_string(number) for number in self._starts
        )

    @staticmethod
    def _to_number(codons):
        if not isinstance(codons, np.ndarray):
            codons = np.array(list(codons), dtype=int)
        return np.sum(_radix_multiplier * codons, axis=-1)

    @staticmethod
    def _to_codon_string(number):
        symbols = []
        for n in (2, 1, 0):
            val = _radix**n
            digit = int(number) // val
            symbols.append(_NUC_SYMBOLS[digit])
            number = int(number) - digit * val
        return "".join(symbols)

    @staticmethod
    @functools.cache
    def load(table_name):
        """
        Load a NCBI codon table.

        Loaded tables are cached, i.e. loading the same table multiple
        times returns the same object.

        Parameters
        ----------
        table_name : str or int
            If a string is given, it is interpreted as official NCBI
            codon table name (e.g. "Vertebrate Mitochondrial").
            An integer is interpreted as NCBI codon table ID.

        Returns
        -------
        table : CodonTable
            The NCBI codon table.

        Raises
        ------
        ResourceNotFoundError
            If no table with the given name or ID exists.
        """
        for table_id, names, fields in _read_table_file():
            if isinstance(table_name, Integral) and not isinstance(
                table_name, bool
            ):
                if table_name != table_id:
                    continue
            elif isinstance(table_name, str):
                if table_name not in names:
                    continue
            else:
                break
            aa = fields["AA"]
            init = fields["Init"]
            base1 = fields["Base1"]
            base2 = fields["Base2"]
            base3 = fields["Base3"]
            symbol_dict = {}
            starts = []
            # aa, init and baseX all have the same length
            for i in range(len(aa)):
                codon = base1[i] + base2[i] + base3[i]
                if init[i] == "i":
                    starts.append(codon)
                symbol_dict[codon] = aa[i]
            return CodonTable(symbol_dict, starts)
        raise ResourceNotFoundError(
            f"Codon table '{table_name}' was not found"
        )



class GeneticCode(Enum):
    """
    This enum type enumerates the NCBI genetic codes that can be used
    for translation.

    Each member carries the NCBI table ID and a description.

    Examples
    --------

    >>> code = GeneticCode.from_name("vertebrate mitochondrial")
    >>> print(code.table_id)
    2
    >>> print(GeneticCode.from_table_id(11).description)
    Bacterial, Archaeal and Plant Plastid Code
    """

    STANDARD = (1, "Standard Code")
    VERTEBRATE_MITOCHONDRIAL = (2, "Vertebrate Mitochondrial Code")
    YEAST_MITOCHONDRIAL = (3, "Yeast Mitochondrial Code")
    MOLD_PROTOZOAN_MITOCHONDRIAL = (
        4, "Mold, Protozoan, and Coelenterate Mitochondrial Code"
    )
    INVERTEBRATE_MITOCHONDRIAL = (5, "Invertebrate Mitochondrial Code")
    CILIATE_NUCLEAR = (6, "Ciliate, Dasycladacean and Hexamita Nuclear Code")
    ECHINODERM_MITOCHONDRIAL = (
        9, "Echinoderm and Flatworm Mitochondrial Code"
    )
    EUPLOTID_NUCLEAR = (10, "Euplotid Nuclear Code")
    BACTERIAL_PLASTID = (11, "Bacterial, Archaeal and Plant Plastid Code")
    ALTERNATIVE_YEAST_NUCLEAR = (12, "Alternative Yeast Nuclear Code")
    ASCIDIAN_MITOCHONDRIAL = (13, "Ascidian Mitochondrial Code")
    ALTERNATIVE_FLATWORM_MITOCHONDRIAL = (
        14, "Alternative Flatworm Mitochondrial Code"
    )
    CHLOROPHYCEAN_MITOCHONDRIAL = (16, "Chlorophycean Mitochondrial Code")
    TREMATODE_MITOCHONDRIAL = (21, "Trematode Mitochondrial Code")
    SCENEDESMUS_OBLIQUUS_MITOCHONDRIAL = (
        22, "Scenedesmus obliquus Mitochondrial Code"
    )
    THRAUSTOCHYTRIUM_MITOCHONDRIAL = (
        23, "Thraustochytrium Mitochondrial Code"
    )
    RHABDOPLEURIDAE_MITOCHONDRIAL = (
        24, "Rhabdopleuridae Mitochondrial Code"
    )
    CANDIDATE_DIVISION_SR1 = (
        25, "Candidate Division SR1 and Gracilibacteria Code"
    )
    PACHYSOLEN_TANNOPHILUS_NUCLEAR = (
        26, "Pachysolen tannophilus Nuclear Code"
    )
    KARYORELICT_NUCLEAR = (27, "Karyorelict Nuclear Code")
    CONDYLOSTOMA_NUCLEAR = (28, "Condylostoma Nuclear Code")
    MESODINIUM_NUCLEAR = (29, "Mesodinium Nuclear Code")
    PERITRICH_NUCLEAR = (30, "Peritrich Nuclear Code")
    BLASTOCRITHIDIA_NUCLEAR = (31, "Blastocrithidia Nuclear Code")
    CEPHALODISCIDAE_MITOCHONDRIAL = (
        33, "Cephalodiscidae Mitochondrial Code"
    )

    @property
    def table_id(self):
        return self.value[0]

    @property
    def description(self):
        return self.value[1]

    @property
    def table(self):
        """
        The :class:`CodonTable` of this genetic code.
        """
        return CodonTable.load(self.table_id)

    @staticmethod
    def from_table_id(table_id):
        """
        Get the genetic code with the given NCBI table ID.

        Parameters
        ----------
        table_id : int
            The NCBI table ID.

        Returns
        -------
        code : GeneticCode or None
            The genetic code or ``None`` if the ID is unknown.
        """
        for code in GeneticCode:
            if code.table_id == table_id:
                return code
        return None

    @staticmethod
    def from_name(name):
        """
        Get the genetic code that matches the given name.

        Parameters
        ----------
        name : str
            Either the member name (case-insensitive, spaces and hyphens
            are treated like underscores), the description, one of the
            NCBI table names or the NCBI table ID as string.

        Returns
        -------
        code : GeneticCode or None
            The genetic code or ``None`` if the name is unknown.
        """
        if name is None:
            return None
        name = name.strip()
        if len(name) == 0:
            return None
        try:
            return GeneticCode.from_table_id(int(name))
        except ValueError:
            pass
        normalized = _normalize_name(name)
        for code in GeneticCode:
            if normalized == code.name:
                return code
            if normalized == _normalize_name(code.description):
                return code
        for table_id, names, _ in _read_table_file():
            for table_name in names:
                normalized_table_name = _normalize_name(table_name)
                if normalized in (
                    normalized_table_name, normalized_table_name + "_CODE"
                ):
                    return GeneticCode.from_table_id(table_id)
        return None


DEFAULT_GENETIC_CODE = GeneticCode.INVERTEBRATE_MITOCHONDRIAL


def resolve_genetic_code(table_id=None, name=None, enum=None):
    """
    Determine the genetic code from multiple optional selectors.

    The first given selector in the order `table_id`, `name`, `enum`
    determines the genetic code, the remaining ones are ignored.
    If the selected ID or name is unknown, the default genetic code
    (*Invertebrate Mitochondrial*) is used instead and a warning is
    raised.

    Parameters
    ----------
    table_id : int, optional
        The NCBI table ID.
    name : str, optional
        A free text name of the genetic code, as accepted by
        :meth:`GeneticCode.from_name()`.
    enum : GeneticCode, optional
        The genetic code itself.

    Returns
    -------
    code : GeneticCode
        The resolved genetic code.

    Examples
    --------

    >>> print(resolve_genetic_code(table_id=1, enum=GeneticCode.YEAST_MITOCHONDRIAL))
    GeneticCode.STANDARD
    >>> print(resolve_genetic_code())
    GeneticCode.INVERTEBRATE_MITOCHONDRIAL
    """
    if table_id is not None:
        code = GeneticCode.from_table_id(table_id)
        if code is None:
            warnings.warn(
                f"Unknown genetic code table {table_id}, "
                f"using '{DEFAULT_GENETIC_CODE.description}' instead",
                UserWarning,
            )
            return DEFAULT_GENETIC_CODE
        return code
    if name is not None:
        code = GeneticCode.from_name(name)
        if code is None:
            warnings.warn(
                f"Unknown genetic code '{name}', "
                f"using '{DEFAULT_GENETIC_CODE.description}' instead",
                UserWarning,
            )
            return DEFAULT_GENETIC_CODE
        return code
    if enum is not None:
        if not isinstance(enum, GeneticCode):
            raise TypeError(
                f"Expected 'GeneticCode', not '{type(enum).__name__}'"
            )
        return enum
    return DEFAULT_GENETIC_CODE


def codon_to_amino_acid(codon, table=None):
    """
    Translate a single codon into an amino acid.

    Parameters
    ----------
    codon : str
        The codon.
        The translation is case-insensitive and ``'U'`` is treated as
        ``'T'``.
    table : CodonTable or GeneticCode or int or str, optional
        The genetic code to use.
        Integers are interpreted as NCBI table ID and strings as genetic
        code name.
        By default the *Invertebrate Mitochondrial* code is used.

    Returns
    -------
    amino_acid : str
        The one-letter symbol of the amino acid, ``'*'`` for a stop
        codon or ``'X'`` if the codon is not a triplet of unambiguous
        nucleotides.

    Examples
    --------

    >>> print(codon_to_amino_acid("AUG", 1))
    M
    >>> print(codon_to_amino_acid("AGA", 1), codon_to_amino_acid("AGA", 5))
    R S
    >>> print(codon_to_amino_acid("ANN", 1))
    X
    """
    table = get_codon_table(table)
    if not isinstance(codon, str) or len(codon) != 3:
        return _UNKNOWN
    return table.map_codons(codon)


def get_codon_table(table):
    """
    Get the :class:`CodonTable` for any of the accepted genetic code
    representations.

    Parameters
    ----------
    table : CodonTable or GeneticCode or int or str or None
        The genetic code, as table itself, as enum member, as NCBI
        table ID or as name.
        ``None`` gives the default genetic code.
        Unknown IDs and names fall back to the default genetic code
        with a warning.

    Returns
    -------
    table : CodonTable
        The codon table.

    Examples
    --------

    >>> print(get_codon_table("Standard") == CodonTable.load(1))
    True
    """
    if table is None:
        return DEFAULT_GENETIC_CODE.table
    if isinstance(table, CodonTable):
        return table
    if isinstance(table, GeneticCode):
        return table.table
    if isinstance(table, Integral):
        return resolve_genetic_code(table_id=table).table
    if isinstance(table, str):
        return resolve_genetic_code(name=table).table
    raise TypeError(f"'{type(table).__name__}' is not a valid genetic code")


def _encode(nucleotides):
    # Non-ASCII characters are replaced by a single '?' each,
    # so that the positions are kept
    ascii_values = np.frombuffer(
        nucleotides.encode("ASCII", errors="replace"), dtype=np.uint8
    )
    return _ascii_to_code[ascii_values]


@functools.cache
def _read_table_file():
    """
    Parse the codon table file into a tuple of
    ``(id, names, fields)`` entries.
    """
    with open(CodonTable._table_file, "r") as f:
        blocks = f.read().split("\n\n")
    tables = []
    for block in blocks:
        table_id = None
        names = ()
        fields = {}
        for line in block.splitlines():
            if not line.strip():
                continue
            key, value = line.split(maxsplit=1)
            if key == "id":
                table_id = int(value)
            elif key == "name":
                names = tuple(name.strip() for name in value.split(";"))
            else:
                fields[key] = value.strip()
        if table_id is not None:
            tables.append((table_id, names, fields))
    return tuple(tables)


def _normalize_name(name):
    normalized = name.strip().upper()
    for char in (" ", "-", ","):
        normalized = normalized.replace(char, "_")
    while "__" in normalized:
        normalized = normalized.replace("__", "_")
    return normalized
