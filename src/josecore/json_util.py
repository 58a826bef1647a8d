"""JSON (de)serialization framework.

The framework presented here is somewhat based on `Go's "json" package`_
(especially the ``omitempty`` functionality).

.. _`Go's "json" package`: http://golang.org/pkg/encoding/json/

"""
import abc
import base64
import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type
from typing import TypeVar

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from josecore import b64
from josecore import errors
from josecore import interfaces
from josecore import util

logger = logging.getLogger(__name__)


class Field:
    """JSON object field.

    :class:`Field` is meant to be used together with
    :class:`JSONObjectWithFields`.

    ``encoder`` (``decoder``) is a callable that accepts a single
    parameter, i.e. a value to be encoded (decoded), and returns the
    serialized (deserialized) value. In case of errors it should raise
    :class:`~josecore.errors.SerializationError`
    (:class:`~josecore.errors.DeserializationError`).

    Note, that ``decoder`` should perform partial serialization only.

    :ivar str json_name: Name of the field when encoded to JSON.
    :ivar default: Default value (used when not present in JSON object).
    :ivar bool omitempty: If ``True`` and the field value is empty, then
        it will not be included in the serialized JSON object, and
        ``default`` will be used for deserialization. Otherwise, if ``False``,
        field is considered as required, value will always be included in the
        serialized JSON objected, and it must also be present when
        deserializing.

    """
    __slots__ = ('json_name', 'default', 'omitempty', 'fdec', 'fenc')

    def __init__(self, json_name: str, default: Any = None, omitempty: bool = False,
                 decoder: Optional[Callable[[Any], Any]] = None,
                 encoder: Optional[Callable[[Any], Any]] = None) -> None:
        # pylint: disable=too-many-arguments
        self.json_name = json_name
        self.default = default
        self.omitempty = omitempty

        self.fdec = self.default_decoder if decoder is None else decoder
        self.fenc = self.default_encoder if encoder is None else encoder

    @classmethod
    def _empty(cls, value: Any) -> bool:
        """Is the provided value considered "empty" for this field?

        This is useful for subclasses that might want to override the
        definition of being empty, e.g. for some more exotic data types.

        """
        return not isinstance(value, bool) and not value

    def omit(self, value: Any) -> bool:
        """Omit the value in output?"""
        return self._empty(value) and self.omitempty

    def _update_params(self, **kwargs: Any) -> 'Field':
        current = dict(json_name=self.json_name, default=self.default,
                       omitempty=self.omitempty,
                       decoder=self.fdec, encoder=self.fenc)
        current.update(kwargs)
        return type(self)(**current)

    def decoder(self, fdec: Callable[[Any], Any]) -> 'Field':
        """Descriptor to change the decoder on JSON object field."""
        return self._update_params(decoder=fdec)

    def encoder(self, fenc: Callable[[Any], Any]) -> 'Field':
        """Descriptor to change the encoder on JSON object field."""
        return self._update_params(encoder=fenc)

    def decode(self, value: Any) -> Any:
        """Decode a value, optionally with context JSON object."""
        return self.fdec(value)

    def encode(self, value: Any) -> Any:
        """Encode a value, optionally with context JSON object."""
        return self.fenc(value)

    @classmethod
    def default_decoder(cls, value: Any) -> Any:
        """Default decoder.

        Recursively deserialize into immutable types (
        :class:`josecore.util.frozendict` instead of
        :func:`dict`, :func:`tuple` instead of :func:`list`).

        """
        # bases cases for different types returned by json.loads
        if isinstance(value, list):
            return tuple(cls.default_decoder(subvalue) for subvalue in value)
        elif isinstance(value, dict):
            return util.frozendict(
                {cls.default_decoder(key): cls.default_decoder(value)
                 for key, value in value.items()})
        else:  # integer or string
            return value

    @classmethod
    def default_encoder(cls, value: Any) -> Any:
        """Default (passthrough) encoder."""
        # field.to_partial_json() is no good as encoder has to do partial
        # serialization only
        return value


class JSONObjectWithFieldsMeta(abc.ABCMeta):
    """Metaclass for :class:`JSONObjectWithFields` and its subclasses.

    It makes sure that, for any class ``cls`` with ``__metaclass__``
    set to ``JSONObjectWithFieldsMeta``:

    1. All fields (attributes of type :class:`Field`) in the class
       definition are moved to the ``cls._fields`` dictionary, where
       keys are field attribute names and values are fields themselves.

    2. ``cls.__slots__`` is extended by all field attribute names
       (i.e. not :attr:`Field.json_name`). Original ``cls.__slots__``
       are stored in ``cls._orig_slots``.

    In a consequence, for a field attribute name ``some_field``,
    ``cls.some_field`` will be a slot descriptor and not an instance
    of :class:`Field`. For example::

      some_field = Field('someField', default=())

      class Foo:
          __metaclass__ = JSONObjectWithFieldsMeta
          __slots__ = ('baz',)
          some_field = some_field

      assert Foo.__slots__ == ('some_field', 'baz')
      assert Foo._orig_slots == ()
      assert Foo.some_field is not Field

      assert Foo._fields.keys() == ['some_field']
      assert Foo._fields['some_field'] is some_field

    As an implementation note, this metaclass inherits from
    :class:`abc.ABCMeta` (and not the usual :class:`type`) to mitigate
    the metaclass conflict (:class:`ImmutableMap` and
    :class:`JSONDeSerializable`, parents of :class:`JSONObjectWithFields`,
    use :class:`abc.ABCMeta` as its metaclass).

    """

    _fields: Dict[str, Field] = {}

    def __new__(mcs, name: str, bases: List[str],
                namespace: Dict[str, Any]) -> 'JSONObjectWithFieldsMeta':
        fields = {}

        for base in bases:
            fields.update(getattr(base, '_fields', {}))
        # Do not reorder, this class might override fields from base classes!
        for key, value in tuple(namespace.items()):
            # not namespace.keys() (in-place edit!)
            if isinstance(value, Field):
                fields[key] = namespace.pop(key)

        # classes without own __slots__ keep the ones of their bases
        inherited: Tuple[str, ...] = ()
        for base in bases:
            inherited += tuple(slot for slot in getattr(base, '_orig_slots', ())
                               if slot not in inherited)
        namespace['_orig_slots'] = namespace.get('__slots__', inherited)
        namespace['__slots__'] = tuple(
            list(namespace['_orig_slots']) + list(fields.keys()))
        namespace['_fields'] = fields

        return abc.ABCMeta.__new__(mcs, name, bases, namespace)


GenericJSONObjectWithFields = TypeVar('GenericJSONObjectWithFields',
                                      bound='JSONObjectWithFields')


class JSONObjectWithFields(util.ImmutableMap,
                           interfaces.JSONDeSerializable,
                           metaclass=JSONObjectWithFieldsMeta):
    """JSON object with fields.

    Example::

      class Foo(JSONObjectWithFields):
          bar = Field('Bar')
          empty = Field('Empty', omitempty=True)

          @bar.encoder
          def bar(value):
              return value + 'bar'

          @bar.decoder
          def bar(value):
              if not value.endswith('bar'):
                  raise errors.DeserializationError('No bar suffix!')
              return value[:-3]

      assert Foo(bar='baz').to_partial_json() == {'Bar': 'bazbar'}
      assert Foo.from_json({'Bar': 'bazbar'}) == Foo(bar='baz')
      assert (Foo.from_json({'Bar': 'bazbar', 'Empty': '!'})
              == Foo(bar='baz', empty='!'))
      assert Foo(bar='baz').bar == 'baz'

    """

    @classmethod
    def _defaults(cls) -> Dict[str, Any]:
        """Get default fields values."""
        return {slot: field.default for slot, field in cls._fields.items()}

    @classmethod
    def json_names(cls) -> FrozenSet[str]:
        """JSON member names of all fields."""
        return frozenset(field.json_name for field in cls._fields.values())

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**{**self._defaults(), **kwargs})

    def encode(self, name: str) -> Any:
        """Encode a single field.

        :param str name: Name of the field to be encoded.

        :raises errors.SerializationError: if field cannot be serialized
        :raises errors.Error: if field could not be found

        """
        try:
            field = self._fields[name]
        except KeyError:
            raise errors.Error("Field not found: {0}".format(name))

        return field.encode(getattr(self, name))

    def fields_to_partial_json(self) -> Dict[str, Any]:
        """Serialize fields to JSON."""
        jobj = {}
        omitted = set()
        for slot, field in self._fields.items():
            value = getattr(self, slot)

            if field.omit(value):
                omitted.add((slot, value))
            else:
                try:
                    jobj[field.json_name] = field.encode(value)
                except errors.SerializationError as error:
                    raise errors.SerializationError(
                        'Could not encode {0} ({1}): {2}'.format(
                            slot, value, error))
        if omitted:
            # omitted values may be key material, log names only
            logger.debug('Omitted empty fields: %s', ', '.join(
                sorted(slot for slot, _ in omitted)))
        return jobj

    def to_partial_json(self) -> Dict[str, Any]:
        return self.fields_to_partial_json()

    @classmethod
    def _check_required(cls, jobj: Mapping[str, Any]) -> None:
        missing = set()
        for _, field in cls._fields.items():
            if not field.omitempty and field.json_name not in jobj:
                missing.add(field.json_name)

        if missing:
            raise errors.DeserializationError(
                'The following fields are required: {0}'.format(
                    ','.join(sorted(missing))))

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Any:
        """Deserialize fields from JSON."""
        if not isinstance(jobj, Mapping):
            raise errors.DeserializationError(
                '{0} is not a JSON object'.format(type(jobj).__name__))
        cls._check_required(jobj)
        fields = {}
        for slot, field in cls._fields.items():
            if field.json_name not in jobj and field.omitempty:
                fields[slot] = field.default
            else:
                value = jobj[field.json_name]
                try:
                    fields[slot] = field.decode(value)
                except errors.DeserializationError as error:
                    raise errors.DeserializationError(
                        'Could not decode {0!r} ({1!r}): {2}'.format(
                            slot, value, error))
        return fields

    @classmethod
    def from_json(cls: Type[GenericJSONObjectWithFields],
                  jobj: Mapping[str, Any]) -> GenericJSONObjectWithFields:
        return cls(**cls.fields_from_json(jobj))


GenericExtensible = TypeVar('GenericExtensible', bound='ExtensibleJSONObjectWithFields')


class ExtensibleJSONObjectWithFields(JSONObjectWithFields):
    """JSON object with fields and arbitrary extension members.

    Members whose names do not belong to any field are kept, in order,
    in the :attr:`extra` mapping (a :class:`~josecore.util.frozendict`)
    and serialized back alongside the fields.

    """
    __slots__ = ('extra',)

    def __init__(self, **kwargs: Any) -> None:
        extra = util.frozendict(kwargs.pop('extra', None) or {})
        clash = self.json_names().intersection(extra)
        if clash:
            raise errors.SerializationError(
                'Registered names in extension members: {0}'.format(
                    ', '.join(sorted(clash))))
        super().__init__(extra=extra, **kwargs)

    @classmethod
    def build(cls: Type[GenericExtensible], params: Mapping[str, Any]) -> GenericExtensible:
        """Create from a flat mapping of field and extension names."""
        return cls(extra={name: value for name, value in params.items()
                          if name not in cls._fields},
                   **{name: value for name, value in params.items()
                      if name in cls._fields})

    def param(self, name: str) -> Any:
        """Value of member ``name`` (JSON name), or ``None``."""
        for slot, field in self._fields.items():
            if field.json_name == name:
                return getattr(self, slot)
        return self.extra.get(name)

    def not_omitted(self) -> Dict[str, Any]:
        """Fields and extension members that would be serialized."""
        params = {name: getattr(self, name)
                  for name, field in self._fields.items()
                  if not field.omit(getattr(self, name))}
        params.update(self.extra)
        return params

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj.update(self.extra)
        return jobj

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Any:
        fields = super().fields_from_json(jobj)
        names = cls.json_names()
        fields['extra'] = {
            name: Field.default_decoder(value)
            for name, value in jobj.items() if name not in names}
        return fields


def encode_b64jose(data: bytes) -> str:
    """Encode JOSE Base-64 field.

    :param bytes data:
    :rtype: `str`

    """
    # b64encode produces ASCII characters only
    return b64.b64encode(data).decode('ascii')


def decode_b64jose(data: str, size: Optional[int] = None, minimum: bool = False) -> bytes:
    """Decode JOSE Base-64 field.

    :param str data:
    :param int size: Required length (after decoding).
    :param bool minimum: If ``True``, then `size` will be treated as
        minimum required length, as opposed to exact equality.

    :raises errors.MalformedSerialization: if ``data`` is not unpadded
        URL-safe Base64, or not of the required size

    :rtype: bytes

    """
    if not isinstance(data, str):
        raise errors.MalformedSerialization(
            'Expected a string, got {0}'.format(type(data).__name__))
    try:
        decoded = b64.b64decode(data)
    except ValueError as error:
        raise errors.MalformedSerialization(error)

    if size is not None and ((not minimum and len(decoded) != size) or
                             (minimum and len(decoded) < size)):
        raise errors.MalformedSerialization(
            "Expected at least or exactly {0} bytes".format(size))

    return decoded


def encode_x5c(certs: Iterable[x509.Certificate]) -> List[str]:
    """Encode certificate chain ("x5c").

    "x5c" does NOT use JOSE Base64, but standard padded Base64 of DER.

    """
    return [base64.b64encode(cert.public_bytes(
        serialization.Encoding.DER)).decode('ascii') for cert in certs]


def decode_x5c(value: Iterable[str]) -> Tuple[x509.Certificate, ...]:
    """Decode certificate chain ("x5c")."""
    if isinstance(value, str):
        raise errors.DeserializationError('"x5c" must be a list')
    try:
        return tuple(x509.load_der_x509_certificate(
            base64.b64decode(cert, validate=True)) for cert in value)
    except (ValueError, TypeError) as error:
        raise errors.DeserializationError(error)


class TypedJSONObjectWithFields(JSONObjectWithFields):
    """JSON object with type."""

    typ: str = NotImplemented
    """Type of the object. Subclasses must override."""

    type_field_name: str = "type"
    """Field name used to distinguish different object types.

    Subclasses will probably have to override this.

    """

    TYPES: Dict[str, Type] = NotImplemented
    """Types registered for JSON deserialization"""

    @classmethod
    def register(cls, type_cls: Type['TypedJSONObjectWithFields'],
                 typ: Optional[str] = None) -> Type['TypedJSONObjectWithFields']:
        """Register class for JSON deserialization."""
        typ = type_cls.typ if typ is None else typ
        cls.TYPES[typ] = type_cls
        return type_cls

    @classmethod
    def get_type_cls(cls, jobj: Mapping[str, Any]) -> Type['TypedJSONObjectWithFields']:
        """Get the registered class for ``jobj``."""
        if not isinstance(jobj, Mapping):
            raise errors.DeserializationError(
                "{0} is not a dictionary object".format(jobj))
        if cls in cls.TYPES.values():
            if cls.type_field_name not in jobj:
                raise errors.DeserializationError(
                    "Missing type field ({0})".format(cls.type_field_name))
            if jobj[cls.type_field_name] != cls.typ:
                raise errors.DeserializationError(
                    "Expected {0}={1!r}".format(cls.type_field_name, cls.typ))
            # cls is already registered type_cls, force to use it
            return cls

        try:
            typ = jobj[cls.type_field_name]
        except KeyError:
            raise errors.DeserializationError("missing type field")

        try:
            return cls.TYPES[typ]
        except (KeyError, TypeError):
            raise errors.UnrecognizedTypeError(typ, jobj)

    def to_partial_json(self) -> Dict[str, Any]:
        """Get JSON serializable object.

        :returns: Serializable JSON object representing the typed object.
        :rtype: dict

        """
        jobj = self.fields_to_partial_json()
        jobj[self.type_field_name] = self.typ
        return jobj

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'TypedJSONObjectWithFields':
        """Deserialize typed object from valid JSON object.

        :raises josecore.errors.UnrecognizedTypeError: if type
            of the object has not been registered.

        """
        # make sure subclasses don't cause infinite recursive from_json calls
        type_cls = cls.get_type_cls(jobj)
        return type_cls(**type_cls.fields_from_json(jobj))
