# track_core/orders/api/views.py
from __future__ import annotations

from django_filters.utils import translate_validation
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from track_core.common.api.pagination import paginate
from track_core.common.idempotency import get_key, load_response, save_response
from track_core.common.permissions import OrderPermission, SubscriptionWriteGate
from track_core.common.scope import require_scope
from track_core.orders import summary
from track_core.orders.api.serializers import (
    OrderSerializer,
    OrderWriteSerializer,
    PaymentCreateSerializer,
    PublicOrderSerializer,
    SizeSummarySerializer,
    StatusChangeSerializer,
)
from track_core.orders.filters import OrderFilter
from track_core.orders.models import Order
from track_core.orders.selectors import get_order, get_public_order, order_qs
from track_core.orders.services import OrderService

TAGS = ["Orders"]


class OrderViewSet(viewsets.GenericViewSet):
    """
    Orders and quotes of the caller's company, addressed by their short number.

    - list/retrieve/create/update/destroy
    - quote (create as quote), duplicate (unsaved draft), convert (quote -> order)
    - payments: POST records one, DELETE payments/{index}/ removes one (admin)
    - status: moves the production timeline
    """
    permission_classes = [OrderPermission, SubscriptionWriteGate]
    lookup_field = "number"
    lookup_value_regex = "[0-9]+"

    serializer_class = OrderSerializer
    queryset = Order.objects.none()

    def _respond_idempotent(self, request, scope, build, *, status_code: int) -> Response:
        key = get_key(request)
        cached = load_response(scope.tenant_id, request.user.id, request.method, request.path, key)
        if cached is not None:
            return Response(cached, status=status_code)

        data = build()
        save_response(scope.tenant_id, request.user.id, request.method, request.path, key, data, status_code)
        return Response(data, status=status_code)

    def _create(self, request, *, as_quote: bool) -> Response:
        scope = require_scope(request)

        ser = OrderWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        def build():
            create = OrderService.create_quote if as_quote else OrderService.create_order
            order = create(tenant_id=scope.tenant_id, data=ser.to_input())
            return OrderSerializer(order).data

        return self._respond_idempotent(request, scope, build, status_code=status.HTTP_201_CREATED)

    @extend_schema(
        tags=TAGS,
        responses={200: OrderSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="search",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Order number, customer name or phone.",
            ),
            OpenApiParameter(name="order_date_from", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="order_date_to", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)

        filterset = OrderFilter(request.query_params, queryset=order_qs(tenant_id=scope.tenant_id))
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)

        return paginate(request, filterset.qs.order_by("-created_at"), OrderSerializer)

    @extend_schema(tags=TAGS, responses={200: OrderSerializer})
    def retrieve(self, request, number=None):
        scope = require_scope(request)
        order = get_order(tenant_id=scope.tenant_id, number=number)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=TAGS,
        request=OrderWriteSerializer,
        responses={201: OrderSerializer},
        parameters=[OpenApiParameter(name="Idempotency-Key", type=OpenApiTypes.STR, location=OpenApiParameter.HEADER, required=False)],
    )
    def create(self, request):
        return self._create(request, as_quote=False)

    @extend_schema(
        tags=TAGS,
        request=OrderWriteSerializer,
        responses={201: OrderSerializer},
        parameters=[OpenApiParameter(name="Idempotency-Key", type=OpenApiTypes.STR, location=OpenApiParameter.HEADER, required=False)],
    )
    @action(detail=False, methods=["post"], url_path="quote")
    def create_quote(self, request):
        return self._create(request, as_quote=True)

    @extend_schema(tags=TAGS, request=OrderWriteSerializer, responses={200: OrderSerializer})
    def update(self, request, number=None):
        scope = require_scope(request)

        ser = OrderWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = OrderService.update_order(tenant_id=scope.tenant_id, number=number, data=ser.to_input())
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(tags=TAGS, responses={204: None})
    def destroy(self, request, number=None):
        scope = require_scope(request)
        OrderService.delete_order(tenant_id=scope.tenant_id, number=number)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=TAGS, responses={200: OrderWriteSerializer})
    @action(detail=True, methods=["get"], url_path="duplicate")
    def duplicate(self, request, number=None):
        scope = require_scope(request)
        order = get_order(tenant_id=scope.tenant_id, number=number)
        draft = OrderService.duplicate_order(order)
        return Response(OrderWriteSerializer(draft).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=TAGS,
        request=PaymentCreateSerializer,
        responses={200: OrderSerializer},
        parameters=[OpenApiParameter(name="Idempotency-Key", type=OpenApiTypes.STR, location=OpenApiParameter.HEADER, required=False)],
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def record_payment(self, request, number=None):
        scope = require_scope(request)

        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        def build():
            order = OrderService.record_payment(
                tenant_id=scope.tenant_id,
                number=number,
                amount=ser.validated_data["amount"],
                method_label=ser.validated_data["method"],
            )
            return OrderSerializer(order).data

        return self._respond_idempotent(request, scope, build, status_code=status.HTTP_200_OK)

    @extend_schema(tags=TAGS, request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["delete"], url_path=r"payments/(?P<index>[0-9]+)")
    def remove_payment(self, request, number=None, index=None):
        scope = require_scope(request)
        order = OrderService.remove_payment(tenant_id=scope.tenant_id, number=number, index=int(index))
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(tags=TAGS, request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="convert")
    def convert(self, request, number=None):
        scope = require_scope(request)
        order = OrderService.convert_quote_to_order(tenant_id=scope.tenant_id, number=number)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(tags=TAGS, request=StatusChangeSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, number=None):
        scope = require_scope(request)

        ser = StatusChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = OrderService.change_status(
            tenant_id=scope.tenant_id,
            number=number,
            new_status=ser.validated_data["status"],
            location=ser.validated_data.get("location"),
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(tags=TAGS, responses={200: SizeSummarySerializer})
    @action(detail=True, methods=["get"], url_path="size-summary")
    def size_summary(self, request, number=None):
        scope = require_scope(request)
        order = get_order(tenant_id=scope.tenant_id, number=number)
        return Response(SizeSummarySerializer(summary.size_summary(order.items.all())).data, status=status.HTTP_200_OK)


class TrackOrderView(APIView):
    """
    Public customer tracking page: company code + order number.
    Available whatever the company's subscription status.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(tags=["Tracking"], responses={200: PublicOrderSerializer})
    def get(self, request, tenant_code: str, number: str):
        order = get_public_order(tenant_code=tenant_code, number=number)
        return Response(PublicOrderSerializer(order).data, status=status.HTTP_200_OK)
