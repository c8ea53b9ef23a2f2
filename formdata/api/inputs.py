"""Echo endpoint listing the parsed request input."""

from formdata.core.logger import LogIcon, logger
from formdata.core.router import Router
from formdata.models.core import FormInput

router = Router(__file__, prefix="/")


@router.post("/input")
@router.put("/input")
@router.patch("/input")
@router.delete("/input")
async def echo_input(form: FormInput) -> FormInput:
    """Return the parsed fields and uploads of the request."""
    logger.info("Input parsed", icon=LogIcon.PROCESSING, fields=len(form.fields), files=len(form.files))
    return form
