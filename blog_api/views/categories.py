"""
Category administration views. Restricted to admins and moderators.
"""
from ..exceptions import BadRequest
from ..forms import CategoryForm, CategoryQueryForm, CategoryStatusForm
from ..models import Category
from ..pagination import paginate
from ..serializers import (
    camel_keys,
    serialize_category,
    serialize_category_ref,
    serialize_hierarchy,
)
from .base import ApiView, ModeratorRequiredMixin, get_or_404, json_body, query_params


def apply_category_data(category, data):
    data = dict(data)
    if "parent_id" in data:
        parent_id = data.pop("parent_id")
        if parent_id is None:
            category.parent = None
        else:
            parent = get_or_404(
                Category.objects.all(), "Parent category not found", pk=parent_id
            )
            if not parent.is_active:
                raise BadRequest("Parent category is not active")
            category.parent = parent

    for name, value in data.items():
        setattr(category, name, value)
    if not category.color:
        category.color = Category._meta.get_field("color").get_default()

    category.full_clean(exclude=["slug"])
    category.save()
    return category


class CategoryListView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        form = CategoryQueryForm(query_params(request))
        params = form.validated()
        queryset = Category.objects.select_related("parent")

        if params["is_active"] is not None:
            queryset = queryset.filter(is_active=params["is_active"])
        if "parentId" in request.GET:
            queryset = queryset.filter(parent_id=params["parent_id"])
        if params["search"]:
            queryset = queryset.search(params["search"])

        queryset = queryset.order_by(form.ordering(), "pk")
        categories, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "categories": [serialize_category(category) for category in categories],
            "pagination": pagination,
        })

    def post(self, request):
        data = CategoryForm(json_body(request)).validated()
        category = apply_category_data(Category(), data)
        return self.respond(
            {"category": serialize_category(category, detail=True)},
            message="Category created successfully",
            status=201,
        )


class CategoryHierarchyView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        return self.respond({"hierarchy": serialize_hierarchy(Category.objects.hierarchy())})


class CategoryStatsView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        top = Category.objects.filter(articles_count__gt=0).order_by("-articles_count")[:5]
        return self.respond({
            "stats": camel_keys(Category.objects.stats()),
            "topCategories": [
                dict(serialize_category_ref(category), articlesCount=category.articles_count)
                for category in top
            ],
        })


class CategoryDetailView(ModeratorRequiredMixin, ApiView):
    def get_category(self, pk):
        return get_or_404(
            Category.objects.select_related("parent"), "Category not found", pk=pk
        )

    def get(self, request, pk):
        return self.respond({"category": serialize_category(self.get_category(pk), detail=True)})

    def put(self, request, pk):
        category = self.get_category(pk)
        data = CategoryForm(json_body(request), partial=True).validated()
        category = apply_category_data(category, data)
        return self.respond(
            {"category": serialize_category(category, detail=True)},
            message="Category updated successfully",
        )

    patch = put

    def delete(self, request, pk):
        category = self.get_category(pk)
        if category.children.exists():
            raise BadRequest("Cannot delete a category that has subcategories")
        category.delete()
        return self.respond(message="Category deleted successfully")


class CategoryStatusView(CategoryDetailView):
    http_method_names = ["patch", "options"]

    def patch(self, request, pk):
        data = CategoryStatusForm(json_body(request)).validated()
        category = self.get_category(pk)
        category.is_active = data["is_active"]
        category.save(update_fields=["is_active", "updated_at"])
        state = "activated" if category.is_active else "deactivated"
        return self.respond(
            {"category": serialize_category(category, detail=True)},
            message=f"Category {state} successfully",
        )
