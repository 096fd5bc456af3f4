from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from availability.serializers import AvailabilityQuoteSerializer, PropertyAvailabilityQuerySerializer
from availability.services.checker import AvailabilityChecker


class CheckAvailabilityView(APIView):
    """Quote a stay and report whether the dates are still free."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        query = PropertyAvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        quote = AvailabilityChecker().check(
            query.validated_data["property_id"],
            query.validated_data["check_in"],
            query.validated_data["check_out"],
        )
        return Response(AvailabilityQuoteSerializer(quote).data)
