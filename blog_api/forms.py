"""
Forms validating JSON bodies and query strings.

Forms receive already snake_cased data. Call ``validated()`` to get the
cleaned values or raise BadRequest with the collected errors.
"""
from django import forms
from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.core.validators import MaxValueValidator

from .conf import api_settings
from .exceptions import BadRequest
from .models import Article, Profile
from .pagination import order_by
from .text import snake_to_camel

HEX_COLOR = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class StringListField(forms.Field):
    """A JSON list of strings. Blank items are dropped."""

    default_error_messages = {
        "invalid": "Enter a list of strings.",
        "item_min_length": "Each item must be at least %(limit)d characters.",
        "item_max_length": "Each item must be at most %(limit)d characters.",
    }

    def __init__(self, *, item_min_length=None, item_max_length=None, **kwargs):
        self.item_min_length = item_min_length
        self.item_max_length = item_max_length
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages["invalid"], code="invalid")

        items = []
        for item in value:
            if not isinstance(item, str):
                raise ValidationError(self.error_messages["invalid"], code="invalid")
            item = item.strip()
            if item:
                items.append(item)
        return items

    def validate(self, value):
        super().validate(value)
        for item in value:
            if self.item_min_length and len(item) < self.item_min_length:
                raise ValidationError(
                    self.error_messages["item_min_length"],
                    code="item_min_length",
                    params={"limit": self.item_min_length},
                )
            if self.item_max_length and len(item) > self.item_max_length:
                raise ValidationError(
                    self.error_messages["item_max_length"],
                    code="item_max_length",
                    params={"limit": self.item_max_length},
                )


class JsonForm(forms.Form):
    """
    Form bound to a decoded JSON body.

    With ``partial=True`` no field is required and only the keys present
    in the body are returned by ``validated()``.
    """

    def __init__(self, data=None, partial=False, **kwargs):
        super().__init__(data={} if data is None else data, **kwargs)
        self.partial = partial
        if partial:
            for field in self.fields.values():
                field.required = False

    def error_list(self):
        errors = []
        for field, messages in self.errors.items():
            name = None if field == NON_FIELD_ERRORS else snake_to_camel(field)
            for message in messages:
                errors.append({"field": name, "message": message})
        return errors

    def validated(self):
        if not self.is_valid():
            errors = self.error_list()
            message = "Validation errors: " + ", ".join(
                f"{e['field']}: {e['message']}" if e["field"] else e["message"]
                for e in errors
            )
            raise BadRequest(message, errors=errors)

        if not self.partial:
            return dict(self.cleaned_data)
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if name in self.data
        }


# Content


class ArticleForm(JsonForm):
    title = forms.CharField(min_length=3, max_length=200)
    content = forms.CharField(min_length=10, strip=False)
    excerpt = forms.CharField(max_length=500, required=False)
    featured_image = forms.CharField(max_length=500, required=False)
    featured_video = forms.CharField(max_length=500, required=False)
    video_type = forms.ChoiceField(
        choices=[("", "")] + Article.VIDEO_TYPE_CHOICES, required=False
    )
    video_thumbnail = forms.CharField(max_length=500, required=False)
    video_duration = forms.IntegerField(min_value=0, required=False)
    category_id = forms.IntegerField(required=False)
    tags = StringListField(item_min_length=2, item_max_length=50, required=False)
    status = forms.ChoiceField(choices=Article.STATUS_CHOICES, required=False)
    is_featured = forms.BooleanField(required=False)
    seo_title = forms.CharField(max_length=60, required=False)
    seo_description = forms.CharField(max_length=160, required=False)
    seo_keywords = StringListField(item_min_length=2, item_max_length=30, required=False)

    def clean_status(self):
        return self.cleaned_data["status"] or Article.STATUS_DRAFT


class ArticleStatusForm(JsonForm):
    status = forms.ChoiceField(
        choices=Article.STATUS_CHOICES,
        error_messages={"invalid_choice": "Invalid status"},
    )


class CategoryForm(JsonForm):
    name = forms.CharField(min_length=2, max_length=100)
    description = forms.CharField(max_length=500, required=False)
    color = forms.RegexField(
        HEX_COLOR,
        required=False,
        error_messages={"invalid": "Invalid hexadecimal color"},
    )
    icon = forms.CharField(max_length=50, required=False)
    parent_id = forms.IntegerField(required=False)


class CategoryStatusForm(JsonForm):
    is_active = forms.NullBooleanField()

    def clean_is_active(self):
        value = self.cleaned_data["is_active"]
        if value is None:
            raise ValidationError("isActive must be true or false")
        return value


class TagForm(JsonForm):
    name = forms.CharField(min_length=2, max_length=50)
    description = forms.CharField(max_length=200, required=False)
    color = forms.RegexField(
        HEX_COLOR,
        required=False,
        error_messages={"invalid": "Invalid hexadecimal color"},
    )


class TagMergeForm(JsonForm):
    source_id = forms.IntegerField()
    target_id = forms.IntegerField()

    def clean(self):
        cleaned = super().clean()
        source, target = cleaned.get("source_id"), cleaned.get("target_id")
        if source is not None and source == target:
            raise ValidationError("Source and target tags cannot be the same")
        return cleaned


class TagBulkForm(JsonForm):
    names = StringListField(item_min_length=2, item_max_length=50)


# Query strings


class ListQueryForm(JsonForm):
    """
    Page, limit, sort and order parameters shared by list endpoints.

    Subclasses set ``sort_fields`` to the whitelist of camelCase sort names,
    optionally mapped to model fields, and the settings naming their page
    sizes.
    """

    sort_fields = {"createdAt": None}
    default_sort = "createdAt"
    default_order = "desc"
    page_size_setting = "ADMIN_PAGE_SIZE"
    max_page_size_setting = "MAX_PAGE_SIZE"

    page = forms.IntegerField(min_value=1, required=False)
    limit = forms.IntegerField(min_value=1, required=False)
    sort = forms.ChoiceField(required=False)
    order = forms.ChoiceField(choices=[("asc", "asc"), ("desc", "desc")], required=False)

    def __init__(self, data=None, **kwargs):
        super().__init__(data, **kwargs)
        max_limit = getattr(api_settings, self.max_page_size_setting)
        self.fields["limit"].validators.append(MaxValueValidator(max_limit))
        self.fields["sort"].choices = [(name, name) for name in self.sort_fields]

    def clean_page(self):
        return self.cleaned_data["page"] or 1

    def clean_limit(self):
        return self.cleaned_data["limit"] or getattr(api_settings, self.page_size_setting)

    def clean_sort(self):
        return self.cleaned_data["sort"] or self.default_sort

    def clean_order(self):
        return self.cleaned_data["order"] or self.default_order

    def ordering(self):
        data = self.cleaned_data
        return order_by(data["sort"], data["order"], self.sort_fields)


class DateRangeMixin(forms.Form):
    date_from = forms.DateTimeField(required=False)
    date_to = forms.DateTimeField(required=False)

    def clean(self):
        cleaned = super().clean()
        date_from, date_to = cleaned.get("date_from"), cleaned.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise ValidationError("dateFrom must be before dateTo")
        return cleaned


class AdminArticleQueryForm(DateRangeMixin, ListQueryForm):
    sort_fields = {
        "title": None,
        "createdAt": None,
        "updatedAt": None,
        "publishedAt": None,
        "viewCount": None,
        "likesCount": None,
    }

    status = forms.ChoiceField(choices=[("", "")] + Article.STATUS_CHOICES, required=False)
    category_id = forms.IntegerField(required=False)
    author_id = forms.IntegerField(required=False)
    is_featured = forms.NullBooleanField(required=False)
    search = forms.CharField(max_length=100, required=False)


class CategoryQueryForm(ListQueryForm):
    sort_fields = {
        "name": None,
        "createdAt": None,
        "updatedAt": None,
        "articlesCount": None,
    }
    default_sort = "name"
    default_order = "asc"
    page_size_setting = "CATEGORY_PAGE_SIZE"

    is_active = forms.NullBooleanField(required=False)
    parent_id = forms.CharField(required=False)
    search = forms.CharField(max_length=100, required=False)

    def clean_parent_id(self):
        """``null`` selects root categories."""
        value = self.cleaned_data["parent_id"]
        if value in ("", "null"):
            return None
        if not value.isdigit():
            raise ValidationError("parentId must be an id or null")
        return int(value)


class TagQueryForm(ListQueryForm):
    sort_fields = {
        "name": None,
        "createdAt": None,
        "popularity": "articles_count",
    }
    default_sort = "name"
    default_order = "asc"
    page_size_setting = "TAG_PAGE_SIZE"

    search = forms.CharField(max_length=100, required=False)
    with_articles = forms.NullBooleanField(required=False)


class PublicArticleQueryForm(ListQueryForm):
    sort_fields = {
        "publishedAt": None,
        "viewCount": None,
        "likesCount": None,
        "title": None,
    }
    default_sort = "publishedAt"
    page_size_setting = "PUBLIC_PAGE_SIZE"
    max_page_size_setting = "PUBLIC_MAX_PAGE_SIZE"

    category = forms.SlugField(required=False)
    tag = forms.SlugField(required=False)
    search = forms.CharField(max_length=100, required=False)


class SearchQueryForm(ListQueryForm):
    page_size_setting = "ADMIN_PAGE_SIZE"
    max_page_size_setting = "PUBLIC_MAX_PAGE_SIZE"

    q = forms.CharField(
        min_length=2,
        max_length=100,
        error_messages={"required": "Search term is required"},
    )
    category = forms.SlugField(required=False)
    tag = forms.SlugField(required=False)


class LimitQueryForm(JsonForm):
    limit = forms.IntegerField(min_value=1, max_value=100, required=False)


class MediaQueryForm(ListQueryForm):
    default_sort = "createdAt"

    type = forms.ChoiceField(choices=[("", "")] + [
        ("image", "image"), ("video", "video"), ("document", "document"),
    ], required=False)
    article_id = forms.IntegerField(required=False)


class UserQueryForm(ListQueryForm):
    page_size_setting = "USER_PAGE_SIZE"


# Accounts


class SignupForm(JsonForm):
    username = forms.RegexField(
        r"^[\w.@+-]+$",
        min_length=3,
        max_length=30,
        error_messages={"invalid": "Username may only contain letters, digits and @/./+/-/_"},
    )
    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)


class SigninForm(JsonForm):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class EmailForm(JsonForm):
    email = forms.EmailField()


class ResetPasswordForm(JsonForm):
    uid = forms.CharField()
    token = forms.CharField()
    new_password = forms.CharField(min_length=6, strip=False)


class ChangePasswordForm(JsonForm):
    current_password = forms.CharField(strip=False)
    new_password = forms.CharField(min_length=6, strip=False)


class RefreshForm(JsonForm):
    refresh_token = forms.CharField(required=False)


class ProfileForm(JsonForm):
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)
    avatar = forms.URLField(max_length=500, required=False)


class AdminUserForm(ProfileForm):
    email = forms.EmailField(required=False)
    role = forms.ChoiceField(choices=Profile.ROLE_CHOICES, required=False)
    is_active = forms.BooleanField(required=False)
    is_verified = forms.BooleanField(required=False)
