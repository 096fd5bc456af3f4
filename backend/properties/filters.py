import django_filters

from .models import Property


class PropertyFilter(django_filters.FilterSet):
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    bedrooms = django_filters.NumberFilter(field_name="bedrooms", lookup_expr="gte")
    status = django_filters.ChoiceFilter(choices=Property.Status.choices)

    class Meta:
        model = Property
        fields = ["location", "min_price", "max_price", "guests", "bedrooms", "status"]
