import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    UNPACKING = auto()
    DONE      = auto()  # the chunk is sealed, no field can be set anymore


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    is_root = condition(instance)
    father = instance

    while not is_root:
        father = instance.father

        is_root = condition(father)
        instance = father

    return father


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    strictly connected to the field named 'length': unpacking reads the
    length from the sibling, setting the data writes it back.

    The syntax for defining the expression is inspired from module resolution:

     - '.' as first char indicates we refer to a field at the same level
     - otherwise the path starts from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        fields_path = self.expression.split('.')
        # '.length'.split(".") -> ['', 'length']
        # 'length'.split(".") -> ['length']

        if fields_path[0] == '':  # we have a relative dependency
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = instance.root

        if field is None:
            raise AttributeError(f'cannot resolve {self!r} for a field without father')

        for component_name in fields_path:
            field = getattr(field, component_name)
            logger.debug(' resolved sub-component "%s" from "%s"', field.__class__.__name__, component_name)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        real_field = self.resolve_field(instance)
        if not hasattr(real_field, 'value'):
            raise ValueError(f'something is wrong with the Dependency resolution!')
        real_field.value = value
