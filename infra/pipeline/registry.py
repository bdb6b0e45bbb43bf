DERIVATIVE_DEFINITIONS = [
    {
        'source_dsid': 'OBJ',
        'destination_dsid': 'OCR',
        'class': 'pipeline.ocr_derivatives.tools.tesseract.OcrInvoker',
        'clears_generate_flag': False,
    },
    {
        'source_dsid': 'OBJ',
        'destination_dsid': 'HOCR',
        'class': 'pipeline.ocr_derivatives.tools.tesseract.HocrInvoker',
        'clears_generate_flag': True,
    },
]

DERIVATIVE_DSIDS = [d['destination_dsid'] for d in DERIVATIVE_DEFINITIONS]


def get_derivative_definition(dsid: str) -> dict:
    for definition in DERIVATIVE_DEFINITIONS:
        if definition['destination_dsid'] == dsid:
            return definition

    raise ValueError(f"Unknown derivative: {dsid}")


def get_invoker_class(dsid: str):
    definition = get_derivative_definition(dsid)
    module_path, class_name = definition['class'].rsplit('.', 1)
    module = __import__(module_path, fromlist=[class_name])
    return getattr(module, class_name)


def get_invoker_instance(dsid: str, config, runner, **kwargs):
    invoker_class = get_invoker_class(dsid)
    return invoker_class(config, runner, **kwargs)
