from enum import Enum, auto


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    PROGRESS  = auto()
    RELAYOUTING = auto()
    PACKING   = auto()
    DONE      = auto()


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        if instance.father is None:
            raise AttributeError(f'no father of {instance!r} satisfies the condition')

        instance = instance.father

    return instance
