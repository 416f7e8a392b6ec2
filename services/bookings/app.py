from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Form, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from prometheus_fastapi_instrumentator import Instrumentator

from common.cache import SimpleTTLCache
from common.catalog import ResourceCatalog
from common.config import get_settings
from common.database import Base, SessionLocal, engine
from common.logging_middleware import add_audit_middleware
from common.models import ResourceType
from common.rate_limit import apply_rate_limiter, client_key, limiter
from common.repository import BookingConflictError, BookingRepository, BookingValidationError
from common.schemas import Booking, BookingCreate, BookingForm, BookingView, FormMessage, ResourceOptions
from common.storage import KeyValueBookingStorage, SqlKeyValueStore
from common.views import BookingFilter, render

from services.bookings.form_controller import BookingFormController, SubmissionState, cancel_url

settings = get_settings()
catalog = ResourceCatalog.from_settings(settings)
form_messages: SimpleTTLCache[FormMessage] = SimpleTTLCache(ttl=settings.message_clear_seconds)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Bookings Service", version="0.3.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)
    return fastapi_app


app = create_app()


def get_today() -> date:
    return date.today()


def get_repository() -> BookingRepository:
    storage = KeyValueBookingStorage(SqlKeyValueStore(SessionLocal), settings.storage_namespace)
    return BookingRepository(storage, catalog)


def get_controller(
    repository: BookingRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> BookingFormController:
    return BookingFormController(repository, catalog, form_messages, today=lambda: today)


def _render_page(
    request: Request,
    controller: BookingFormController,
    booking_filter: BookingFilter = BookingFilter.TODAY,
    form: Optional[BookingForm] = None,
    message: Optional[FormMessage] = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    form = form or controller.default_form()
    context = {
        "form": form,
        "min_date": controller.today().isoformat(),
        "resource_types": [resource_type.value for resource_type in ResourceType],
        "resource_options": controller.resource_options(form.resource_type),
        "message": message,
        "message_clear_ms": int(settings.message_clear_seconds * 1000),
        "filters": list(BookingFilter),
        "active_filter": booking_filter,
        "title": booking_filter.heading,
        "rows": controller.view(booking_filter),
    }
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "bookings"}


@app.get("/", response_class=HTMLResponse, tags=["form"])
def booking_page(
    request: Request,
    booking_filter: BookingFilter = Query(BookingFilter.TODAY, alias="filter"),
    resource_type: Optional[ResourceType] = None,
    controller: BookingFormController = Depends(get_controller),
) -> HTMLResponse:
    form = controller.default_form()
    if resource_type is not None:
        form = form.model_copy(update={"resource_type": resource_type.value})
    return _render_page(
        request,
        controller,
        booking_filter,
        form=form,
        message=controller.message_for(client_key(request)),
    )


@app.get("/resources", response_model=ResourceOptions, tags=["form"])
def resource_options(resource_type: ResourceType) -> ResourceOptions:
    return ResourceOptions(resource_type=resource_type, options=catalog.options(resource_type))


@app.post("/form/bookings", response_class=HTMLResponse, tags=["form"])
@limiter.limit("20/minute")
def submit_booking_form(
    request: Request,
    staff_name: str = Form(""),
    resource_type: str = Form(""),
    resource: str = Form(""),
    booking_date: str = Form("", alias="date"),
    start_time: str = Form(""),
    end_time: str = Form(""),
    controller: BookingFormController = Depends(get_controller),
):
    form = BookingForm(
        staff_name=staff_name,
        resource_type=resource_type,
        resource=resource,
        date=booking_date,
        start_time=start_time,
        end_time=end_time,
    )
    outcome = controller.submit(form, client_key(request))
    if outcome.accepted:
        return RedirectResponse("/?filter=today", status_code=status.HTTP_303_SEE_OTHER)
    status_code = (
        status.HTTP_409_CONFLICT
        if outcome.state is SubmissionState.REJECTED_CONFLICT
        else status.HTTP_400_BAD_REQUEST
    )
    return _render_page(
        request,
        controller,
        form=outcome.form,
        message=outcome.message,
        status_code=status_code,
    )


@app.post("/form/bookings/{booking_id}/cancel", tags=["form"])
@limiter.limit("20/minute")
def cancel_booking_form(
    request: Request,
    booking_id: int,
    confirmed: bool = Form(False),
    controller: BookingFormController = Depends(get_controller),
) -> RedirectResponse:
    controller.cancel(booking_id, confirmed)
    return RedirectResponse("/?filter=today", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/bookings", response_model=List[Booking], tags=["bookings"])
def list_bookings(repository: BookingRepository = Depends(get_repository)) -> List[Booking]:
    return repository.list()


@app.get("/bookings/view", response_model=BookingView, tags=["bookings"])
def view_bookings(
    booking_filter: BookingFilter = Query(BookingFilter.TODAY, alias="filter"),
    repository: BookingRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> BookingView:
    rows = render(booking_filter, repository.list(), today, cancel_url=cancel_url)
    return BookingView(filter=booking_filter.value, title=booking_filter.heading, rows=rows)


@app.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED, tags=["bookings"])
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    repository: BookingRepository = Depends(get_repository),
) -> Booking:
    try:
        return repository.create(booking_in)
    except BookingValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except BookingConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc


@app.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["bookings"])
@limiter.limit("20/minute")
def delete_booking(
    request: Request,
    booking_id: int,
    repository: BookingRepository = Depends(get_repository),
) -> None:
    repository.cancel(booking_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("services.bookings.app:app", host="0.0.0.0", port=settings.bookings_service_port)
