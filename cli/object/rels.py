from pipeline.ocr_derivatives.schemas import (
    GenerateOcrFlag,
    GENERATE_OCR_PREDICATE,
    HAS_LANGUAGE_PREDICATE,
    ISLANDORA_RELS_EXT_URI,
)
from cli.helpers import get_repository, load_object

FLAG_CHOICES = {
    'generate': GenerateOcrFlag.GENERATE,
    'suppress': GenerateOcrFlag.SUPPRESS,
}


def cmd_rels_set_language(args):
    obj = load_object(get_repository(), args.pid)
    obj.relationships.set_value(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE_PREDICATE, args.language)
    print(f"✓ {obj.pid} {HAS_LANGUAGE_PREDICATE} = {args.language}")


def cmd_rels_flag(args):
    obj = load_object(get_repository(), args.pid)

    if args.value == 'clear':
        removed = obj.relationships.remove(ISLANDORA_RELS_EXT_URI, GENERATE_OCR_PREDICATE)
        print(f"✓ {obj.pid} {GENERATE_OCR_PREDICATE} {'cleared' if removed else 'was not set'}")
        return

    flag = FLAG_CHOICES[args.value]
    obj.relationships.set_value(ISLANDORA_RELS_EXT_URI, GENERATE_OCR_PREDICATE, flag.value)
    print(f"✓ {obj.pid} {GENERATE_OCR_PREDICATE} = {flag.value}")
