from django.db import models


class DepartmentQuerySet(models.QuerySet):
    def for_department(self, department):
        return self.filter(department=department)


class DepartmentManager(models.Manager):
    queryset_class = DepartmentQuerySet

    def get_queryset(self):
        return self.queryset_class(self.model, using=self._db)

    def for_department(self, department):
        return self.get_queryset().for_department(department)
