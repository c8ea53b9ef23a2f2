"""formdata-api - multipart/form-data parsing service powered by Robyn."""

from robyn import Robyn

from formdata.api.health import router as health_router
from formdata.api.inputs import router as inputs_router
from formdata.core.lifespan import create_lifespan
from formdata.core.logger import LogIcon, logger
from formdata.core.settings import settings as st
from formdata.events.upload_dir import UploadDirEvent
from formdata.middlewares.base import MiddlewareHandler
from formdata.middlewares.files import FormInputOpenAPIMiddleware
from formdata.middlewares.request_id import RequestIdMiddleware

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(UploadDirEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(inputs_router)

# Middlewares, after routes so global ones see every endpoint
middlewares = MiddlewareHandler(app)
middlewares.register(RequestIdMiddleware())
middlewares.register(FormInputOpenAPIMiddleware())


def main() -> None:
    logger.info("Starting service", icon=LogIcon.START, name=st.API_NAME, url=st.api_url)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
