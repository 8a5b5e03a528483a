"""global configuration / base class for pydantic models used to describe near-to-far setups."""

from __future__ import annotations

import json
import pathlib
from functools import wraps
from typing import Any, Dict, Tuple

import h5py
import numpy as np
import pydantic.v1 as pydantic
import xarray as xr
import yaml
from pydantic.v1.fields import ModelField

from ..exceptions import FileError
from .data.data_array import DATA_ARRAY_MAP
from .types import TYPE_TAG_STR, ComplexNumber, Literal

INDENT_JSON_FILE = 4  # default indentation of json string in json files
INDENT = None  # default indentation of json string used internally
JSON_TAG = "JSON_STRING"


def cache(prop):
    """Decorates a property to cache the first computed value and return it on subsequent calls."""

    # note, we could also just use `prop` as dict key, but hashing property might be slow
    prop_name = prop.__name__

    @wraps(prop)
    def cached_property_getter(self):
        """The new property method to be returned by decorator."""

        stored_value = self._cached_properties.get(prop_name)

        if stored_value is not None:
            return stored_value

        computed_value = prop(self)
        self._cached_properties[prop_name] = computed_value
        return computed_value

    return cached_property_getter


def cached_property(cached_property_getter):
    """Shortcut for property(cache()) of a getter."""

    return property(cache(cached_property_getter))


def ndarray_encoder(val):
    """How a ``np.ndarray`` gets handled before saving to json."""
    if np.any(np.iscomplex(val)):
        return dict(real=val.real.tolist(), imag=val.imag.tolist())
    return val.real.tolist()


def _data_array_encoder(val):
    """Data arrays are not written to json, only their type name."""
    return type(val).__name__


def _get_valid_extension(fname: str) -> str:
    """Return the file extension from fname, validated to accepted ones."""
    valid_extensions = [".json", ".yaml"]
    extensions = [s.lower() for s in pathlib.Path(fname).suffixes[-1:]]
    if len(extensions) == 0:
        raise FileError(f"File '{fname}' missing extension.")
    extension = extensions[-1]
    if extension in valid_extensions:
        return extension
    raise FileError(
        f"File extension must be one of {', '.join(valid_extensions)}; file '{fname}' does not "
        "match any of those. Data-carrying objects provide their own 'to_hdf5()'."
    )


class Near2FarBaseModel(pydantic.BaseModel):
    """Base pydantic model that all near2far components inherit from.
    Defines configuration for handling data structures
    as well as methods for importing, exporting, and hashing near2far objects.
    For more details on pydantic base models, see:
    `Pydantic Models <https://pydantic-docs.helpmanual.io/usage/models/>`_
    """

    def __hash__(self) -> int:
        """Hash method."""
        try:
            return super().__hash__(self)
        except TypeError:
            return hash(self.json())

    def __init__(self, **kwargs):
        """Init method, includes post-init validators."""
        super().__init__(**kwargs)
        self._post_init_validators()

    def _post_init_validators(self) -> None:
        """Call validators taking ``self`` that get run after init, implement in subclasses.

        Exceptions raised here are not wrapped into a ``pydantic.ValidationError``.
        """

    def __init_subclass__(cls) -> None:
        """Things that are done to each of the models."""

        cls.add_type_field()

    class Config:
        """Sets config for all :class:`Near2FarBaseModel` objects.

        Configuration Options
        ---------------------
        allow_population_by_field_name : bool = True
            Allow properties to stand in for fields(?).
        arbitrary_types_allowed : bool = True
            Allow types like numpy arrays.
        extra : str = 'forbid'
            Forbid extra kwargs not specified in model.
        json_encoders : Dict[type, Callable]
            Defines how to encode type in json file.
        validate_all : bool = True
            Validate default values just to be safe.
        validate_assignment : bool
            Re-validate after re-assignment of field in model.
        """

        arbitrary_types_allowed = True
        validate_all = True
        extra = "forbid"
        validate_assignment = True
        allow_population_by_field_name = True
        json_encoders = {
            np.ndarray: ndarray_encoder,
            complex: lambda x: ComplexNumber(real=x.real, imag=x.imag),
            xr.DataArray: _data_array_encoder,
        }
        frozen = True
        allow_mutation = False
        copy_on_model_validation = "none"

    _cached_properties = pydantic.PrivateAttr({})

    def copy(self, deep: bool = True, **kwargs) -> Near2FarBaseModel:
        """Copy a Near2FarBaseModel.  With ``deep=True`` as default."""
        kwargs.update(deep=deep)
        new_copy = pydantic.BaseModel.copy(self, **kwargs)
        return self.validate(new_copy.dict())

    def updated_copy(self, deep: bool = True, **kwargs) -> Near2FarBaseModel:
        """Make copy of a component instance with ``**kwargs`` indicating updated field values.

        Example
        -------
        >>> region = region.updated_copy(resolution=40) # doctest: +SKIP
        """
        return self.copy(update=kwargs, deep=deep)

    @classmethod
    def from_file(cls, fname: str, **parse_obj_kwargs) -> Near2FarBaseModel:
        """Loads a :class:`Near2FarBaseModel` from .yaml or .json file.

        Parameters
        ----------
        fname : str
            Full path to the file to load the :class:`Near2FarBaseModel` from.
        **parse_obj_kwargs
            Keyword arguments passed to pydantic's ``parse_obj`` function when loading model.

        Returns
        -------
        :class:`Near2FarBaseModel`
            An instance of the component class calling ``from_file``.

        Example
        -------
        >>> region = NearFieldRegion.from_file(fname='folder/region.json') # doctest: +SKIP
        """
        extension = _get_valid_extension(fname)
        if extension == ".json":
            with open(fname, encoding="utf-8") as json_fhandle:
                model_dict = json.load(json_fhandle)
        else:
            with open(fname, encoding="utf-8") as yaml_in:
                model_dict = yaml.safe_load(yaml_in)
        return cls.parse_obj(model_dict, **parse_obj_kwargs)

    def to_file(self, fname: str) -> None:
        """Exports :class:`Near2FarBaseModel` instance to .yaml or .json file

        Parameters
        ----------
        fname : str
            Full path to the .yaml or .json file to save the :class:`Near2FarBaseModel` to.

        Example
        -------
        >>> region.to_file(fname='folder/region.json') # doctest: +SKIP
        """
        extension = _get_valid_extension(fname)
        json_string = self._json(indent=INDENT_JSON_FILE)
        if extension == ".json":
            with open(fname, "w", encoding="utf-8") as file_handle:
                file_handle.write(json_string)
            return
        model_dict = json.loads(json_string)
        with open(fname, "w+", encoding="utf-8") as file_handle:
            yaml.dump(model_dict, file_handle, indent=INDENT_JSON_FILE)

    def _json(self, indent=INDENT, exclude_unset=False, **kwargs) -> str:
        """Overwrites the model ``json`` representation with some extra customized handling.

        Parameters
        -----------
        **kwargs : kwargs passed to `self.json()`

        Returns
        -------
        str
            Json-formatted string holding :class:`Near2FarBaseModel` data.
        """

        def make_json_compatible(json_string: str) -> str:
            """Makes the string compatible with json standards, notably for infinity."""

            tmp_string = "<<TEMPORARY_INFINITY_STRING>>"
            json_string = json_string.replace("-Infinity", tmp_string)
            json_string = json_string.replace("Infinity", '"Infinity"')
            return json_string.replace(tmp_string, '"-Infinity"')

        json_string = self.json(indent=indent, exclude_unset=exclude_unset, **kwargs)
        return make_json_compatible(json_string)

    @staticmethod
    def tuple_to_dict(tuple_values: tuple) -> dict:
        """How we generate a dictionary mapping new keys to tuple values for hdf5."""
        return {str(i): val for i, val in enumerate(tuple_values)}

    def to_hdf5(self, fname: str) -> None:
        """Exports :class:`Near2FarBaseModel` instance to .hdf5 file.

        The model is stored as a json string, and every data array it holds is written to the
        hdf5 group named after its location in the model.

        Parameters
        ----------
        fname : str
            Full path to the .hdf5 file to save the :class:`Near2FarBaseModel` to.

        Example
        -------
        >>> spectrum.to_hdf5(fname="folder/spectrum.hdf5") # doctest: +SKIP
        """

        with h5py.File(fname, "w") as f_handle:
            f_handle[JSON_TAG] = self._json()

            def add_data_to_file(data_dict: dict, group_path: str = "") -> None:
                """For every DataArray item in dictionary, write path of hdf5 group as value."""

                for key, value in data_dict.items():
                    # append the key to the path
                    subpath = f"{group_path}/{key}"

                    if isinstance(value, xr.DataArray):
                        value.to_hdf5(fname=f_handle, group_path=subpath)

                    # if a tuple, assign each element a unique key
                    elif isinstance(value, (list, tuple)):
                        value_dict = self.tuple_to_dict(tuple_values=value)
                        add_data_to_file(data_dict=value_dict, group_path=subpath)

                    # if a dict, recurse
                    elif isinstance(value, dict):
                        add_data_to_file(data_dict=value, group_path=subpath)

            add_data_to_file(data_dict=self.dict())

    @classmethod
    def dict_from_hdf5(cls, fname: str) -> Dict[str, Any]:
        """Loads a dictionary containing the model contents from a .hdf5 file.

        Parameters
        ----------
        fname : str
            Full path to the .hdf5 file to load the :class:`Near2FarBaseModel` from.

        Returns
        -------
        dict
            Dictionary containing the model.
        """

        def is_data_array(value: Any) -> bool:
            """Whether a value is supposed to be a data array based on the contents."""
            return isinstance(value, str) and value in DATA_ARRAY_MAP

        with h5py.File(fname, "r") as f_handle:
            if JSON_TAG not in f_handle:
                raise FileError(f"File '{fname}' does not hold a near2far model.")
            json_string = f_handle[JSON_TAG][()]
            model_dict = json.loads(json_string)

            def load_data_from_file(model_dict: dict, group_path: str = "") -> None:
                """For every DataArray item in dictionary, load path of hdf5 group as value."""

                items: Tuple[Tuple[Any, Any], ...]
                if isinstance(model_dict, list):
                    items = tuple(enumerate(model_dict))
                else:
                    items = tuple(model_dict.items())

                for key, value in items:
                    subpath = f"{group_path}/{key}"

                    if is_data_array(value):
                        data_array_type = DATA_ARRAY_MAP[value]
                        model_dict[key] = data_array_type.from_hdf5(
                            fname=f_handle, group_path=subpath
                        )

                    elif isinstance(value, (list, dict)):
                        load_data_from_file(model_dict=value, group_path=subpath)

            load_data_from_file(model_dict=model_dict)
        return model_dict

    @classmethod
    def from_hdf5(cls, fname: str, **parse_obj_kwargs) -> Near2FarBaseModel:
        """Loads :class:`Near2FarBaseModel` instance from .hdf5 file.

        Parameters
        ----------
        fname : str
            Full path to the .hdf5 file to load the :class:`Near2FarBaseModel` from.
        **parse_obj_kwargs
            Keyword arguments passed to pydantic's ``parse_obj`` method.

        Example
        -------
        >>> spectrum = FrozenSpectrum.from_hdf5(fname="folder/spectrum.hdf5") # doctest: +SKIP
        """
        model_dict = cls.dict_from_hdf5(fname=fname)
        return cls.parse_obj(model_dict, **parse_obj_kwargs)

    def __eq__(self, other):
        """Define == for two Near2FarBaseModels."""
        if other is None:
            return False

        def check_equal(dict1: dict, dict2: dict) -> bool:
            """Check if two dictionaries are equal, with special handlings."""

            # if different keys, automatically fail
            if not dict1.keys() == dict2.keys():
                return False

            # loop through elements in each dict
            for key in dict1.keys():
                val1 = dict1[key]
                val2 = dict2[key]

                # if one of val1 or val2 is None (exclusive OR)
                if (val1 is None) != (val2 is None):
                    return False

                # convert tuple to dict to use this recursive function
                if isinstance(val1, tuple) or isinstance(val2, tuple):
                    if len(val1) != len(val2):
                        return False
                    val1 = dict(zip(range(len(val1)), val1))
                    val2 = dict(zip(range(len(val2)), val2))

                # if dictionaries, recurse
                if isinstance(val1, dict) or isinstance(val2, dict):
                    are_equal = check_equal(val1, val2)
                    if not are_equal:
                        return False

                # if numpy arrays, use numpy to do equality check
                elif isinstance(val1, np.ndarray) or isinstance(val2, np.ndarray):
                    if not np.array_equal(val1, val2):
                        return False

                # everything else
                else:
                    # note: this logic is because != is handled differently in DataArrays
                    if not val1 == val2:
                        return False

            return True

        if not isinstance(other, Near2FarBaseModel):
            return False

        return check_equal(self.dict(), other.dict())

    @classmethod
    def add_type_field(cls) -> None:
        """Automatically place "type" field with model name in the model field dictionary."""

        value = cls.__name__
        annotation = Literal[value]

        tag_field = ModelField.infer(
            name=TYPE_TAG_STR,
            value=value,
            annotation=annotation,
            class_validators=None,
            config=cls.__config__,
        )
        cls.__fields__[TYPE_TAG_STR] = tag_field
